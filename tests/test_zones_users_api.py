# tests/test_zones_users_api.py
"""Default zone, user city, live feed and health endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.models import City, Zone, User
from app.services.zone_service import get_or_create_default_zone


class TestDefaultZone:
    def test_city_id_required(self, client, seeded):
        r = client.get("/api/zones/default")
        assert r.status_code == 400
        assert r.json()["detail"] == "cityId is required"

    def test_unknown_city(self, client, seeded):
        assert client.get("/api/zones/default", params={"cityId": "atlantis"}).status_code == 404

    def test_existing_zone_returned(self, client, seeded):
        body = client.get("/api/zones/default", params={"cityId": "c1"}).json()
        assert body == {"success": True, "zoneId": "z1", "name": "Downtown", "isNew": False}

    def test_zone_created_once(self, client, db, seeded):
        db.add(City(id="c3", name="Capital City"))
        db.commit()

        first = client.get("/api/zones/default", params={"cityId": "c3"}).json()
        second = client.get("/api/zones/default", params={"cityId": "c3"}).json()

        assert first["isNew"] is True
        assert first["name"] == "Default Zone"
        assert second["isNew"] is False
        assert second["zoneId"] == first["zoneId"]
        assert db.query(Zone).filter(Zone.city_id == "c3").count() == 1

    def test_service_sets_description_and_status(self, db, seeded):
        db.add(City(id="c4", name="Ogdenville"))
        db.commit()
        zone, is_new = get_or_create_default_zone(db, "c4")
        assert is_new
        assert zone.description == "Automatically created for security monitoring"
        assert zone.status == "ACTIVE"


class TestUserCity:
    def test_requires_sign_in(self, client, seeded):
        assert client.get("/api/user/city").status_code == 401

    def test_own_city(self, client, seeded, auth_headers):
        r = client.get("/api/user/city", headers=auth_headers)
        assert r.status_code == 200
        assert r.json() == {"cityId": "c1"}

    def test_lookup_by_email(self, client, db, seeded, auth_headers):
        db.add(User(id="u2", name="Lee", email="lee@example.com", city_id="c2"))
        db.commit()
        r = client.get("/api/user/city", params={"email": "lee@example.com"}, headers=auth_headers)
        assert r.json() == {"cityId": "c2"}

    def test_no_city_assigned(self, client, db, seeded, auth_headers):
        db.add(User(id="u3", name="Kim", email="kim@example.com"))
        db.commit()
        r = client.get("/api/user/city", params={"email": "kim@example.com"}, headers=auth_headers)
        assert r.status_code == 404
        assert r.json()["detail"] == "User has no assigned city"

    def test_unknown_email(self, client, seeded, auth_headers):
        r = client.get("/api/user/city", params={"email": "ghost@example.com"}, headers=auth_headers)
        assert r.status_code == 404


class TestStatusEndpoints:
    def test_live_feed_disabled(self, client):
        assert client.get("/api/live-feed").json() == {"state": "DISABLED", "recentAlerts": []}

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["liveFeed"] == "disabled"
