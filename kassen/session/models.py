from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kassen.session import events
from kassen.utils import ensure_utc

TRASH_FIGHT_NAME = "Trash"
UNKNOWN_RAID_ID = -1


class SessionBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UnitData(SessionBaseModel):
    """Cumulative counters for one unit, as recorded by the addon."""

    dmg: int = 0
    dmg_taken: int = 0
    raw_heal: int = 0
    eff_heal: int = 0
    overheal: int = 0
    death: int = 0
    decurse: int = 0

    def delta(self, earlier: "UnitData | None") -> "UnitData":
        if earlier is None:
            return self.model_copy()
        return UnitData(
            dmg=self.dmg - earlier.dmg,
            dmg_taken=self.dmg_taken - earlier.dmg_taken,
            raw_heal=self.raw_heal - earlier.raw_heal,
            eff_heal=self.eff_heal - earlier.eff_heal,
            overheal=self.overheal - earlier.overheal,
            death=self.death - earlier.death,
            decurse=self.decurse - earlier.decurse,
        )


class TimeSlice(SessionBaseModel):
    time: int
    event: str = ""
    group_member_ids: list[int] | None = Field(None, alias="groupMemberIDs")
    unit_datas: dict[int, UnitData] = {}
    changed_unit_datas: set[int] = set()

    def is_start_event(self) -> bool:
        return events.is_start_event(self.event)

    def is_dead_event(self) -> bool:
        return events.is_dead_event(self.event)

    def is_dead_yell_event(self) -> bool:
        return events.is_dead_yell_event(self.event)

    def is_wipe_event(self) -> bool:
        return events.is_wipe_event(self.event)

    def event_boss(self) -> str | None:
        return events.get_event_boss(self.event)

    def is_event_boss(self, boss_name: str) -> bool:
        return events.is_event_boss(self.event, boss_name)

    def is_start_event_for(self, boss_name: str) -> bool:
        return events.is_start_event_for(self.event, boss_name)

    def event_boss_health(self, boss_name: str) -> tuple[int, int] | None:
        return events.get_event_boss_health(self.event, boss_name)


class RaidPeriodEntry(SessionBaseModel):
    """One raid lockout the recording player was saved to."""

    raid_id: int = Field(alias="raidID")
    raid_reset_date: datetime
    last_seen: datetime


class DamageDataSession(SessionBaseModel):
    """One recorded login session: from logon (or /reload) to logoff."""

    time_slices: list[TimeSlice] = []
    unit_id_to_names: dict[int, str] = Field({}, alias="unitIDToNames")
    raid_members: list[str] = []
    start_date_time: datetime
    start_time: int = 0  # Recorder clock at session start
    start_server_time: int = 0  # Realm time as hours * 60 + minutes
    realm: str = "Unknown"
    player: str = "Unknown"
    addon_version: str = "1.0"
    raid_id_data: dict[str, list[RaidPeriodEntry]] = Field({}, alias="raidIDData")

    def slice_datetime(self, time: int) -> datetime:
        return ensure_utc(self.start_date_time) + timedelta(seconds=time - self.start_time)

    def slice_server_time(self, time: int) -> int:
        return self.start_server_time + (time - self.start_time)

    def unit_id(self, name: str) -> int | None:
        for unit_id, unit_name in self.unit_id_to_names.items():
            if unit_name == name:
                return unit_id
        return None


class FightData(SessionBaseModel):
    """A boss encounter or a trash interval cut out of a session."""

    fight_name: str
    start_date_time: datetime
    fight_duration: int = -1
    raid_id: int = Field(UNKNOWN_RAID_ID, alias="raidID")
    raid_reset_date_time: datetime | None = None
    fight_unit_ids: tuple[int, ...] = Field((), alias="fightUnitIDs", frozen=True)
    time_slices: list[TimeSlice] = []
    perfect_sync: bool | None = None
    realm: str = "Unknown"
    recorded_by_player: str = "Unknown"
    addon_version: str = "1.0"
    start_server_time: int = 0

    @property
    def is_trash(self) -> bool:
        return self.fight_name == TRASH_FIGHT_NAME

    @property
    def raid_period_known(self) -> bool:
        return self.raid_id != UNKNOWN_RAID_ID

    def contains_this_fight(self, time_slice: TimeSlice) -> bool:
        from kassen.pipeline.activity import contains_fight

        return contains_fight(self.fight_unit_ids, time_slice)

    def detect_activity(self, prev: TimeSlice, curr: TimeSlice) -> bool:
        from kassen.pipeline.activity import detect_activity

        return detect_activity(self.fight_unit_ids, prev, curr)
