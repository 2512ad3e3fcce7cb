# tests/test_sensor_service.py
"""Unit tests for sensor type inference and find-or-create."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import MagicMock
from sqlalchemy.exc import IntegrityError
from app.models.sensor import Sensor
from app.services.sensor_service import (
    infer_sensor_type, find_or_create_sensor, location_key,
)


class TestSensorTypeInference:
    def test_camera_is_video(self):
        assert infer_sensor_type("Camera 3") == "VIDEO"

    def test_thermal(self):
        assert infer_sensor_type("Thermal Sensor A") == "THERMAL"

    def test_each_keyword(self):
        assert infer_sensor_type("Lobby video wall") == "VIDEO"
        assert infer_sensor_type("Garage Motion Detector") == "MOTION"
        assert infer_sensor_type("Bridge vibration probe") == "VIBRATION"
        assert infer_sensor_type("Plaza Audio Array") == "AUDIO"
        assert infer_sensor_type("Roof Weather Station") == "WEATHER"

    def test_unmatched_defaults_to_video(self):
        assert infer_sensor_type("North Perimeter") == "VIDEO"
        assert infer_sensor_type("") == "VIDEO"

    def test_priority_order(self):
        assert infer_sensor_type("Thermal camera") == "VIDEO"
        assert infer_sensor_type("Motion and audio") == "MOTION"

    def test_location_key(self):
        assert location_key("  North   Perimeter ") == "north perimeter"


class TestFindOrCreateMocked:
    def test_existing_sensor_reused(self):
        existing = Sensor(id="s1", location="North Perimeter")
        db = MagicMock()
        db.query.return_value.filter.return_value.order_by.return_value.first.return_value = existing

        assert find_or_create_sensor(db, "North Perimeter", "z1", "c1") is existing
        db.add.assert_not_called()

    def test_new_sensor_created(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.order_by.return_value.first.return_value = None

        sensor = find_or_create_sensor(db, "Thermal Sensor A", "z1", "c1")

        db.add.assert_called_once_with(sensor)
        db.flush.assert_called_once()
        assert sensor.type == "THERMAL"
        assert sensor.status == "ACTIVE"
        assert sensor.name == "Thermal Sensor A Sensor"
        assert sensor.location_key == "thermal sensor a"

    def test_lost_creation_race_rereads_winner(self):
        winner = Sensor(id="s-winner", location="Gate 4")
        db = MagicMock()
        db.query.return_value.filter.return_value.order_by.return_value.first.side_effect = [None, winner]
        db.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

        assert find_or_create_sensor(db, "Gate 4", "z1", "c1") is winner
        db.rollback.assert_called_once()


class TestFindOrCreateDatabase:
    def test_idempotent_for_known_location(self, db, seeded):
        first = find_or_create_sensor(db, "North Perimeter", "z1", "c1")
        db.commit()
        second = find_or_create_sensor(db, "North Perimeter", "z1", "c1")
        db.commit()

        assert first.id == second.id
        assert db.query(Sensor).count() == 1

    def test_case_insensitive_substring_match(self, db, seeded):
        stored = find_or_create_sensor(db, "North Perimeter Fence Camera", "z1", "c1")
        db.commit()

        assert find_or_create_sensor(db, "north perimeter", "z1", "c1").id == stored.id
        assert db.query(Sensor).count() == 1

    def test_scoped_to_zone_and_city(self, db, seeded):
        a = find_or_create_sensor(db, "Main Gate", "z1", "c1")
        b = find_or_create_sensor(db, "Main Gate", "z2", "c2")
        db.commit()

        assert a.id != b.id
        assert db.query(Sensor).count() == 2

    def test_like_wildcards_are_literal(self, db, seeded):
        find_or_create_sensor(db, "Dock A", "z1", "c1")
        db.commit()

        created = find_or_create_sensor(db, "%", "z1", "c1")
        db.commit()
        assert created.location == "%"
        assert db.query(Sensor).count() == 2
