"""Tests for session and fight data models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from kassen.session.models import (
    DamageDataSession,
    FightData,
    RaidPeriodEntry,
    TimeSlice,
    UnitData,
)

SESSION_JSON = """
{
  "timeSlices": [
    {
      "time": 1000,
      "event": "Start=Onyxia",
      "groupMemberIDs": [1, 2],
      "unitDatas": {"1": {"dmg": 120, "effHeal": 5}, "7": {"dmgTaken": 120}},
      "changedUnitDatas": [1, 7]
    },
    {"time": 1003, "unitDatas": {"1": {"dmg": 300}}, "changedUnitDatas": [1]}
  ],
  "unitIDToNames": {"1": "Lyro", "2": "Mend", "7": "Onyxia"},
  "raidMembers": ["Lyro", "Mend"],
  "startDateTime": "2024-03-01T20:00:00Z",
  "startTime": 1000,
  "startServerTime": 1200,
  "realm": "Nordanaar",
  "player": "Lyro",
  "addonVersion": "2.3",
  "raidIDData": {
    "Onyxia's Lair": [
      {"raidID": 4411, "raidResetDate": "2024-03-03T08:00:00Z", "lastSeen": "2024-03-01T21:00:00Z"}
    ]
  }
}
"""


class TestDamageDataSession:
    def test_parses_recorder_json(self):
        session = DamageDataSession.model_validate_json(SESSION_JSON)
        assert len(session.time_slices) == 2
        first = session.time_slices[0]
        assert first.group_member_ids == [1, 2]
        assert first.unit_datas[1].dmg == 120
        assert first.unit_datas[1].eff_heal == 5
        assert first.unit_datas[7].dmg_taken == 120
        assert first.changed_unit_datas == {1, 7}
        assert session.time_slices[1].group_member_ids is None
        assert session.unit_id_to_names[7] == "Onyxia"
        assert session.raid_id_data["Onyxia's Lair"][0].raid_id == 4411

    def test_defaults(self):
        session = DamageDataSession(start_date_time=datetime(2024, 3, 1, tzinfo=UTC))
        assert session.time_slices == []
        assert session.realm == "Unknown"
        assert session.raid_id_data == {}

    def test_slice_datetime_uses_recorder_offset(self):
        session = DamageDataSession.model_validate_json(SESSION_JSON)
        assert session.slice_datetime(1003) == datetime(2024, 3, 1, 20, 0, 3, tzinfo=UTC)

    def test_slice_datetime_naive_start(self):
        session = DamageDataSession(start_date_time=datetime(2024, 3, 1, 20, 0))
        assert session.slice_datetime(60).tzinfo is UTC

    def test_slice_server_time(self):
        session = DamageDataSession.model_validate_json(SESSION_JSON)
        assert session.slice_server_time(1003) == 1203

    def test_unit_id(self):
        session = DamageDataSession.model_validate_json(SESSION_JSON)
        assert session.unit_id("Onyxia") == 7
        assert session.unit_id("Nefarian") is None

    def test_missing_start_date_rejected(self):
        with pytest.raises(ValidationError):
            DamageDataSession.model_validate_json('{"timeSlices": []}')


class TestUnitData:
    def test_delta(self):
        later = UnitData(dmg=500, dmg_taken=40, eff_heal=30, death=1)
        earlier = UnitData(dmg=200, dmg_taken=40, eff_heal=10)
        d = later.delta(earlier)
        assert (d.dmg, d.dmg_taken, d.eff_heal, d.death) == (300, 0, 20, 1)

    def test_delta_from_missing_unit(self):
        later = UnitData(dmg=500)
        d = later.delta(None)
        assert d.dmg == 500
        assert d is not later


class TestTimeSlice:
    def test_event_shortcuts(self):
        s = TimeSlice(time=0, event="Wipe=Nefarian")
        assert s.is_wipe_event()
        assert not s.is_dead_event()
        assert s.is_event_boss("Nefarian")
        assert s.event_boss() is None

    def test_defaults_not_shared(self):
        a = TimeSlice(time=0)
        b = TimeSlice(time=1)
        a.changed_unit_datas.add(5)
        assert b.changed_unit_datas == set()


class TestFightData:
    def _fight(self, **kwargs):
        return FightData(
            fight_name="Onyxia",
            start_date_time=datetime(2024, 3, 1, 20, 0, tzinfo=UTC),
            **kwargs,
        )

    def test_defaults(self):
        fight = self._fight()
        assert fight.fight_duration == -1
        assert fight.raid_id == -1
        assert not fight.raid_period_known
        assert fight.perfect_sync is None
        assert not fight.is_trash

    def test_trash(self):
        fight = FightData(fight_name="Trash", start_date_time=datetime(2024, 3, 1, tzinfo=UTC))
        assert fight.is_trash

    def test_unit_ids_frozen(self):
        fight = self._fight(fight_unit_ids=(7,))
        with pytest.raises(ValidationError):
            fight.fight_unit_ids = (8,)

    def test_contains_and_activity(self):
        fight = self._fight(fight_unit_ids=(7,))
        prev = TimeSlice(time=0, unit_datas={7: UnitData(dmg_taken=10)}, changed_unit_datas={7})
        curr = TimeSlice(time=3, unit_datas={7: UnitData(dmg_taken=90)}, changed_unit_datas={7})
        assert fight.contains_this_fight(curr)
        assert fight.detect_activity(prev, curr)
        assert not fight.detect_activity(curr, curr)

    def test_serialises_with_recorder_aliases(self):
        fight = self._fight(fight_unit_ids=(7,), raid_id=4411)
        data = fight.model_dump(by_alias=True)
        assert data["fightName"] == "Onyxia"
        assert data["fightUnitIDs"] == (7,)
        assert data["raidID"] == 4411


class TestRaidPeriodEntry:
    def test_by_field_name(self):
        entry = RaidPeriodEntry(
            raid_id=1,
            raid_reset_date=datetime(2024, 3, 3, tzinfo=UTC),
            last_seen=datetime(2024, 3, 1, tzinfo=UTC),
        )
        assert entry.raid_id == 1
