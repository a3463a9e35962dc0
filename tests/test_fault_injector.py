"""Tests for per-tick probabilistic fault injection."""

import random

import pytest
from sqlalchemy import func, select

from conftest import FixedRolls
from db.models import FaultLog, Machine
from schemas.machine import MachineSummary
from services.fault_injector import FAULT_TYPES, FaultInjector, fault_description

ONE_ACTIVE = [MachineSummary(id="M001", name="Braider Alpha", status="Active")]


async def fault_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(FaultLog))).scalar_one()


class TestRoll:
    """The per-tick draw fires strictly above 1 - p."""

    def test_threshold_is_exclusive(self):
        injector = FaultInjector(probability=0.02, rng=FixedRolls(0.98, 0.9800001, 0.5, 0.999))
        assert injector.roll() is False
        assert injector.roll() is True
        assert injector.roll() is False
        assert injector.roll() is True

    def test_rate_converges_to_probability(self):
        injector = FaultInjector(probability=0.02, rng=random.Random(20240501))
        ticks = 100_000
        fired = sum(injector.roll() for _ in range(ticks))
        # 0.02 +/- ~3.4 standard deviations
        assert abs(fired / ticks - 0.02) < 0.0015

    def test_zero_probability_never_fires(self):
        injector = FaultInjector(probability=0.0, rng=random.Random(1))
        assert not any(injector.roll() for _ in range(10_000))

    @pytest.mark.parametrize("probability", [-0.1, 1.5])
    def test_rejects_invalid_probability(self, probability):
        with pytest.raises(ValueError):
            FaultInjector(probability=probability)

    def test_rejects_empty_vocabulary(self):
        with pytest.raises(ValueError):
            FaultInjector(fault_types=())


class TestChoose:

    def test_fault_types_are_fixed_vocabulary(self):
        assert FAULT_TYPES == ("Overheating", "High Vibration", "Thread Break", "Power Surge")

    def test_selection_covers_fleet_and_vocabulary(self):
        fleet = [MachineSummary(id=f"M{i}", name=f"Machine {i}", status="Active") for i in range(4)]
        injector = FaultInjector(rng=random.Random(5))
        picks = [injector.choose(fleet) for _ in range(2000)]
        assert {machine.id for machine, _ in picks} == {m.id for m in fleet}
        assert {fault_type for _, fault_type in picks} == set(FAULT_TYPES)

    def test_description_names_fault(self):
        assert fault_description("Power Surge") == "Automatic detection of Power Surge"


class TestMaybeInject:

    async def test_no_fire_writes_nothing(self, db_session, machines):
        injector = FaultInjector(rng=FixedRolls(0.1))
        fleet = [MachineSummary(**{k: m[k] for k in ("id", "name", "status")}) for m in machines]

        assert await injector.maybe_inject(db_session, fleet) is None
        assert await fault_count(db_session) == 0

    async def test_fire_records_fault_and_flips_status(self, db_session, session_maker):
        db_session.add(Machine(id="M001", name="Braider Alpha", type="Braiding Machine", serial_number="SN-1"))
        await db_session.commit()

        injector = FaultInjector(rng=FixedRolls(0.99))
        alert = await injector.maybe_inject(db_session, ONE_ACTIVE)

        assert alert is not None
        assert alert.machine_id == "M001"
        assert alert.machine_name == "Braider Alpha"
        assert alert.fault_type in FAULT_TYPES

        async with session_maker() as fresh:
            rows = (await fresh.execute(select(FaultLog))).scalars().all()
            assert len(rows) == 1
            assert rows[0].machine_id == "M001"
            assert rows[0].fault_type == alert.fault_type
            assert rows[0].description == f"Automatic detection of {alert.fault_type}"
            assert rows[0].timestamp is not None
            machine = await fresh.get(Machine, "M001")
            assert machine.status == "Fault"

    async def test_under_maintenance_is_overridden(self, db_session):
        db_session.add(Machine(
            id="M008", name="Winder Lite", type="Winding Machine",
            serial_number="SN-8", status="Under Maintenance",
        ))
        await db_session.commit()
        fleet = [MachineSummary(id="M008", name="Winder Lite", status="Under Maintenance")]

        await FaultInjector(rng=FixedRolls(0.999)).maybe_inject(db_session, fleet)

        db_session.expire_all()
        assert (await db_session.get(Machine, "M008")).status == "Fault"

    async def test_already_faulted_machine_gets_another_entry(self, db_session):
        db_session.add(Machine(id="M003", name="Twister X", type="Twisting Machine",
                               serial_number="SN-3", status="Fault"))
        await db_session.commit()
        fleet = [MachineSummary(id="M003", name="Twister X", status="Fault")]

        injector = FaultInjector(rng=FixedRolls(0.99, 0.99))
        await injector.maybe_inject(db_session, fleet)
        await injector.maybe_inject(db_session, fleet)

        assert await fault_count(db_session) == 2

    async def test_empty_snapshot_skips_but_consumes_roll(self, db_session):
        rng = FixedRolls(0.99, 0.1)
        injector = FaultInjector(rng=rng)

        assert await injector.maybe_inject(db_session, []) is None
        assert await fault_count(db_session) == 0
        assert injector.roll() is False
