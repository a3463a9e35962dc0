"""Tests for synthetic sensor reading generation."""

import json
import random
from datetime import datetime, timezone

import pytest

from schemas.events import SensorUpdateEvent, encode_event
from schemas.machine import MachineSummary
from services.telemetry_service import (
    FAULT_PROFILE,
    NORMAL_PROFILE,
    SensorRange,
    TelemetryService,
    profile_for_status,
)

SAMPLES = 2000
FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def telemetry() -> TelemetryService:
    return TelemetryService(rng=random.Random(42), clock=lambda: FIXED_NOW)


def assert_within(reading, profile) -> None:
    assert reading.temperature in profile.temperature
    assert reading.vibration in profile.vibration
    assert reading.rpm in profile.rpm
    assert reading.power in profile.power
    assert reading.tension in profile.tension


class TestRegimes:
    """Values stay inside the range set selected by status."""

    @pytest.mark.parametrize("status", ["Active", "Under Maintenance"])
    def test_non_fault_status_reads_normal(self, telemetry, status):
        machine = MachineSummary(id="M001", name="Braider Alpha", status=status)
        for _ in range(SAMPLES):
            assert_within(telemetry.generate_reading(machine), NORMAL_PROFILE)

    def test_fault_status_reads_fault(self, telemetry):
        machine = MachineSummary(id="M003", name="Twister X", status="Fault")
        for _ in range(SAMPLES):
            assert_within(telemetry.generate_reading(machine), FAULT_PROFILE)

    def test_profile_selection(self):
        assert profile_for_status("Fault") is FAULT_PROFILE
        assert profile_for_status("Active") is NORMAL_PROFILE
        assert profile_for_status("Under Maintenance") is NORMAL_PROFILE

    def test_regimes_do_not_overlap(self):
        assert NORMAL_PROFILE.temperature.high < FAULT_PROFILE.temperature.low
        assert NORMAL_PROFILE.vibration.high < FAULT_PROFILE.vibration.low
        assert FAULT_PROFILE.rpm.high < NORMAL_PROFILE.rpm.low
        assert NORMAL_PROFILE.power.high < FAULT_PROFILE.power.low
        assert FAULT_PROFILE.tension.high < NORMAL_PROFILE.tension.low


class TestSensorRange:

    def test_sample_uses_low_plus_scaled_draw(self):
        class Half(random.Random):
            def random(self):
                return 0.5

            def getrandbits(self, k):
                return super().getrandbits(k)

        assert SensorRange(40.0, 55.0).sample(Half()) == pytest.approx(47.5)

    def test_half_open(self):
        band = SensorRange(1.0, 2.0)
        assert 1.0 in band
        assert 2.0 not in band


class TestReadings:

    def test_reading_carries_identity_and_clock(self, telemetry):
        machine = MachineSummary(id="M002", name="Winder Pro", status="Active")
        reading = telemetry.generate_reading(machine)
        assert reading.machine_id == "M002"
        assert reading.name == "Winder Pro"
        assert reading.timestamp == FIXED_NOW

    def test_readings_follow_input_order(self, telemetry):
        fleet = [
            MachineSummary(id=f"M{i:03d}", name=f"Machine {i}", status="Active")
            for i in (5, 1, 9, 3)
        ]
        readings = telemetry.generate_readings(fleet)
        assert [r.machine_id for r in readings] == ["M005", "M001", "M009", "M003"]

    def test_no_memory_between_readings(self):
        machine = MachineSummary(id="M001", name="Braider Alpha", status="Active")
        first = TelemetryService(rng=random.Random(3)).generate_reading(machine)
        # A generator that has already produced other readings draws different values
        warmed = TelemetryService(rng=random.Random(3))
        warmed.generate_reading(machine)
        second = warmed.generate_reading(machine)
        assert first.temperature != second.temperature

    def test_same_seed_same_values(self):
        machine = MachineSummary(id="M001", name="Braider Alpha", status="Fault")
        a = TelemetryService(rng=random.Random(11), clock=lambda: FIXED_NOW).generate_reading(machine)
        b = TelemetryService(rng=random.Random(11), clock=lambda: FIXED_NOW).generate_reading(machine)
        assert a == b


class TestWireFormat:

    def test_sensor_update_uses_camel_case(self, telemetry):
        machine = MachineSummary(id="M001", name="Braider Alpha", status="Active")
        event = SensorUpdateEvent(data=[telemetry.generate_reading(machine)])
        payload = json.loads(encode_event(event))

        assert payload["type"] == "SENSOR_UPDATE"
        assert len(payload["data"]) == 1
        assert set(payload["data"][0]) == {
            "machineId", "name", "temperature", "vibration",
            "rpm", "power", "tension", "timestamp",
        }
        assert payload["data"][0]["machineId"] == "M001"
        assert payload["data"][0]["timestamp"].startswith("2024-05-01T12:00:00")
