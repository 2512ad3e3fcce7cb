# CityWatch — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.city import City                                          # noqa
from app.models.zone import Zone                                          # noqa
from app.models.sensor import Sensor, SensorData                          # noqa
from app.models.alert import Alert, alert_sensors                         # noqa
from app.models.action import Action                                      # noqa
from app.models.user import User, AuthSession                             # noqa
from app.models.organization import Organization, OrganizationMember, Invitation  # noqa
