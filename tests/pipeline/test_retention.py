"""Tests for fight keep/discard rules and unit trimming."""

from datetime import UTC, datetime

from kassen.config import SegmentationConfig, TrashConfig
from kassen.pipeline.retention import (
    has_enough_boss_slices,
    is_significant_trash,
    remove_unnecessary_units,
)
from kassen.session.models import FightData, TimeSlice, UnitData

START = datetime(2024, 3, 1, 20, 0, tzinfo=UTC)
TRASH_UNITS = range(100, 111)


def _trash(duration, *, busy_slices=12, dmg_per_slice=2000):
    slices = []
    for n in range(busy_slices):
        slices.append(TimeSlice(
            time=n * 10,
            unit_datas={u: UnitData(dmg=dmg_per_slice * (n + 1)) for u in TRASH_UNITS},
            changed_unit_datas=set(TRASH_UNITS),
        ))
    return FightData(
        fight_name="Trash",
        start_date_time=START,
        fight_duration=duration,
        time_slices=slices,
    )


def _boss_fight(changed_per_slice):
    return FightData(
        fight_name="Gothik the Harvester",
        start_date_time=START,
        fight_unit_ids=(10,),
        time_slices=[
            TimeSlice(time=n * 5, changed_unit_datas=set(changed))
            for n, changed in enumerate(changed_per_slice)
        ],
    )


class TestIsSignificantTrash:
    def test_duration_boundary_is_strict(self):
        config = TrashConfig()
        assert not is_significant_trash(_trash(120), config)
        assert is_significant_trash(_trash(121), config)

    def test_needs_more_than_ten_busy_slices(self):
        config = TrashConfig()
        assert not is_significant_trash(_trash(300, busy_slices=10), config)
        assert is_significant_trash(_trash(300, busy_slices=11), config)

    def test_busy_slice_needs_more_than_ten_units(self):
        trash = _trash(300)
        for s in trash.time_slices:
            s.changed_unit_datas = set(list(TRASH_UNITS)[:10])
        assert not is_significant_trash(trash, TrashConfig())

    def test_damage_must_exceed_threshold(self):
        # 11 units * 11 slices of growth past the first slice
        assert not is_significant_trash(_trash(300, dmg_per_slice=800), TrashConfig())
        assert is_significant_trash(_trash(300, dmg_per_slice=900), TrashConfig())

    def test_empty_trash(self):
        trash = FightData(fight_name="Trash", start_date_time=START, fight_duration=500)
        assert not is_significant_trash(trash, TrashConfig())

    def test_thresholds_configurable(self):
        config = TrashConfig(min_duration_sec=30, min_busy_slices=2, min_damage=10)
        assert is_significant_trash(_trash(60, busy_slices=3), config)


class TestHasEnoughBossSlices:
    def test_five_boss_slices_is_enough(self):
        fight = _boss_fight([{10}] * 5 + [{1}] * 5)
        assert has_enough_boss_slices(fight, None, SegmentationConfig())

    def test_four_boss_slices_is_not(self):
        fight = _boss_fight([{10}] * 4 + [{1}] * 5)
        assert not has_enough_boss_slices(fight, None, SegmentationConfig())

    def test_adds_give_second_chance(self):
        fight = _boss_fight([{10}] * 2 + [{20}] * 8 + [{1}] * 3)
        assert has_enough_boss_slices(fight, (20,), SegmentationConfig())

    def test_second_chance_needs_ten_slices(self):
        fight = _boss_fight([{10}] * 2 + [{20}] * 7 + [{1}] * 3)
        assert not has_enough_boss_slices(fight, (20,), SegmentationConfig())


class TestRemoveUnnecessaryUnits:
    def _fight(self):
        shared = TimeSlice(
            time=0,
            group_member_ids=[1, 2],
            unit_datas={1: UnitData(dmg=10), 2: UnitData(dmg=20), 10: UnitData(), 99: UnitData()},
            changed_unit_datas={1, 10, 99},
        )
        later = TimeSlice(
            time=5,
            unit_datas={1: UnitData(dmg=50), 10: UnitData(dmg_taken=40), 99: UnitData(dmg=7)},
            changed_unit_datas={1, 99},
        )
        fight = FightData(
            fight_name="Patchwerk",
            start_date_time=START,
            fight_unit_ids=(10,),
            time_slices=[shared, later],
        )
        return fight, shared

    def test_keeps_boss_and_roster_units(self):
        fight, _ = self._fight()

        remove_unnecessary_units(fight)

        assert set(fight.time_slices[0].unit_datas) == {1, 2, 10}
        assert set(fight.time_slices[1].unit_datas) == {1, 10}
        assert fight.time_slices[0].changed_unit_datas == {1, 10}
        assert fight.time_slices[1].changed_unit_datas == {1}

    def test_does_not_touch_shared_slices(self):
        fight, shared = self._fight()

        remove_unnecessary_units(fight)

        assert 99 in shared.unit_datas
        assert fight.time_slices[0] is not shared

    def test_deltas_of_kept_units_unchanged(self):
        fight, _ = self._fight()

        remove_unnecessary_units(fight)

        first, second = fight.time_slices
        assert second.unit_datas[1].delta(first.unit_datas[1]).dmg == 40
