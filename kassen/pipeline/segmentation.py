"""Cut a recorded session into boss fights and trash intervals.

The engine walks the session's time slices once. Lookaheads (encounter
conflicts, wipe validation, perfect-sync detection) and the add rescan on
timeout are bounded sub-scans over the same slice list by index.
"""

import logging
from dataclasses import dataclass

from kassen.config import Settings, get_settings
from kassen.pipeline.activity import contains_fight, count_active_units, detect_activity
from kassen.pipeline.knowledge import BossKnowledge, UnresolvedBossError, default_knowledge
from kassen.pipeline.raid_periods import RaidPeriodNotFoundError, fetch_relevant_raid_period
from kassen.pipeline.retention import (
    has_enough_boss_slices,
    is_significant_trash,
    remove_unnecessary_units,
)
from kassen.session.events import rewrite_deaths_as_add_deaths
from kassen.session.models import (
    TRASH_FIGHT_NAME,
    UNKNOWN_RAID_ID,
    DamageDataSession,
    FightData,
    TimeSlice,
)
from kassen.utils import elapsed_seconds

logger = logging.getLogger(__name__)


@dataclass
class _PassState:
    fight: FightData | None = None
    trash: FightData | None = None
    roster: list[int] | None = None
    last_activity_time: int = 0
    last_activity_slice: TimeSlice | None = None

    def reset_activity(self) -> None:
        self.last_activity_time = 0
        self.last_activity_slice = None


class FightSegmenter:
    def __init__(
        self,
        session: DamageDataSession,
        knowledge: BossKnowledge | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.knowledge = knowledge or default_knowledge()
        self.settings = settings or get_settings()
        self.config = self.settings.segmentation
        self._add_ids: dict[str, tuple[int, ...]] = {}

    def generate_fights(self, save_trash: bool = False) -> list[FightData]:
        # Working copy: rewritten slices replace entries here, never in the session
        slices = list(self.session.time_slices)
        state = _PassState()
        fights: list[FightData] = []

        for i in range(len(slices)):
            curr = slices[i]
            self._propagate_roster(state, curr)

            if save_trash:
                if state.trash is None and state.fight is None:
                    state.trash = self._new_fight(TRASH_FIGHT_NAME, curr)
                if state.trash is not None:
                    state.trash.time_slices.append(curr)

            handled = False
            if curr.event:
                if curr.is_start_event():
                    boss_name = curr.event_boss()
                    if boss_name is not None:
                        handled = self._on_start(state, slices, i, boss_name, fights)
                elif state.fight is not None and (
                    curr.is_dead_event() or curr.is_wipe_event()
                ):
                    if curr.is_event_boss(state.fight.fight_name):
                        handled = True
                        self._on_end(state, slices, i, fights)
                        curr = slices[i]

            if not handled and state.fight is not None:
                self._check_timeout(state, slices, i, fights)

            if state.fight is not None:
                self._track_activity(state, curr)
                state.fight.time_slices.append(curr)

        if state.fight is not None:
            logger.debug(
                "Session ended during %s; fight not recorded",
                state.fight.fight_name,
            )
        if state.trash is not None:
            logger.debug("Session ended during trash; interval not recorded")

        for fight in fights:
            remove_unnecessary_units(fight)

        logger.info(
            "Generated %d fights (%d trash) from %d time slices for %s-%s",
            len(fights), sum(1 for f in fights if f.is_trash), len(slices),
            self.session.player, self.session.realm,
        )
        return fights

    # -- interval lifecycle ------------------------------------------------

    def _new_fight(
        self,
        name: str,
        time_slice: TimeSlice,
        unit_ids: tuple[int, ...] = (),
    ) -> FightData:
        return FightData(
            fight_name=name,
            start_date_time=self.session.slice_datetime(time_slice.time),
            fight_unit_ids=unit_ids,
            realm=self.session.realm,
            recorded_by_player=self.session.player,
            addon_version=self.session.addon_version,
            start_server_time=self.session.slice_server_time(time_slice.time),
        )

    def _assign_raid_period(self, fight: FightData, instance: str, time_slice: TimeSlice) -> None:
        try:
            period = fetch_relevant_raid_period(
                self.session.raid_id_data,
                instance,
                self.session.slice_datetime(time_slice.time),
            )
        except RaidPeriodNotFoundError:
            logger.debug("No raid period recorded for %s; marking unknown", instance)
            fight.raid_id = UNKNOWN_RAID_ID
            fight.raid_reset_date_time = None
            return
        fight.raid_id = period.raid_id
        fight.raid_reset_date_time = period.raid_reset_date

    def _open_fight(
        self,
        state: _PassState,
        boss_name: str,
        unit_ids: tuple[int, ...],
        instance: str,
        time_slice: TimeSlice,
    ) -> FightData:
        fight = self._new_fight(boss_name, time_slice, unit_ids)
        self._assign_raid_period(fight, instance, time_slice)
        state.fight = fight
        state.reset_activity()
        logger.debug(
            "Started %s at t=%d (units %s, raid ID %d)",
            boss_name, time_slice.time, list(unit_ids), fight.raid_id,
        )
        return fight

    def _close_trash(
        self, trash: FightData, time_slice: TimeSlice, instance: str, fights: list[FightData],
    ) -> None:
        trash.fight_duration = elapsed_seconds(
            trash.start_date_time, self.session.slice_datetime(time_slice.time),
        )
        self._assign_raid_period(trash, instance, time_slice)
        if is_significant_trash(trash, self.settings.trash):
            fights.append(trash)
            logger.debug("Kept trash of %ds ending at t=%d", trash.fight_duration, time_slice.time)
        else:
            logger.debug("Discarded trash of %ds ending at t=%d", trash.fight_duration, time_slice.time)

    def _resolve_boss(self, boss_name: str, time_slice: TimeSlice) -> tuple[tuple[int, ...], str] | None:
        try:
            instance = self.knowledge.instance_of(boss_name)
            unit_ids = self.knowledge.resolve_fight_unit_ids(boss_name, self.session)
        except UnresolvedBossError as e:
            logger.warning("Ignoring start of %s at t=%d: %s", boss_name, time_slice.time, e)
            return None
        return unit_ids, instance

    def _boss_add_ids(self, boss_name: str) -> tuple[int, ...]:
        if boss_name not in self._add_ids:
            self._add_ids[boss_name] = self.knowledge.resolve_add_unit_ids(
                boss_name, self.session,
            )
        return self._add_ids[boss_name]

    # -- start events ------------------------------------------------------

    def _on_start(
        self,
        state: _PassState,
        slices: list[TimeSlice],
        i: int,
        boss_name: str,
        fights: list[FightData],
    ) -> bool:
        """Open or replace the current fight. Returns whether it did either."""
        curr = slices[i]
        fight = state.fight
        if fight is not None and fight.fight_name == boss_name:
            return False

        resolved = self._resolve_boss(boss_name, curr)
        if resolved is None:
            return False
        unit_ids, instance = resolved

        if fight is None:
            if state.trash is not None:
                self._close_trash(state.trash, curr, instance, fights)
                state.trash = None
            self._open_fight(state, boss_name, unit_ids, instance, curr)
            return True

        current_score = self._activity_score(fight.fight_unit_ids, slices, i)
        challenger_score = self._activity_score(unit_ids, slices, i)
        challenger_score += self.knowledge.conflict_bonus(fight.fight_name, boss_name)
        if challenger_score <= current_score:
            logger.debug(
                "Kept %s over %s at t=%d (score %d vs %d)",
                fight.fight_name, boss_name, curr.time, current_score, challenger_score,
            )
            return False

        logger.debug(
            "Abandoned %s for %s at t=%d (score %d vs %d)",
            fight.fight_name, boss_name, curr.time, current_score, challenger_score,
        )
        new_fight = self._open_fight(state, boss_name, unit_ids, instance, curr)
        if i > 0:
            new_fight.time_slices.append(slices[i - 1])
        return True

    def _activity_score(self, unit_ids: tuple[int, ...], slices: list[TimeSlice], start: int) -> int:
        score = 0
        last_seen = None
        for s in slices[start:start + self.config.conflict_lookahead_slices]:
            if not contains_fight(unit_ids, s):
                continue
            if last_seen is not None and detect_activity(unit_ids, last_seen, s):
                score += 1
            last_seen = s
        return score

    # -- death / wipe events -----------------------------------------------

    def _on_end(
        self,
        state: _PassState,
        slices: list[TimeSlice],
        i: int,
        fights: list[FightData],
    ) -> None:
        fight = state.fight
        curr = slices[i]

        rule = self.knowledge.fake_death_rule(fight.fight_name)
        if rule is not None and curr.is_dead_event() and not rule.is_real_death(curr):
            slices[i] = curr.model_copy(
                update={"event": rewrite_deaths_as_add_deaths(curr.event)},
            )
            logger.debug("Fake death of %s at t=%d", fight.fight_name, curr.time)
            return

        if curr.is_wipe_event() and self.knowledge.is_disappearing(fight.fight_name):
            if self._is_spurious_wipe(fight, slices, i):
                logger.debug("Spurious wipe on %s at t=%d", fight.fight_name, curr.time)
                return

        fight.time_slices.append(curr)
        fight.perfect_sync = self._detect_perfect_sync(fight, slices, i)
        fight.fight_duration = elapsed_seconds(
            fight.start_date_time, self.session.slice_datetime(curr.time),
        )
        add_ids = None
        if self.knowledge.is_disappearing(fight.fight_name):
            add_ids = self._boss_add_ids(fight.fight_name)
        if has_enough_boss_slices(fight, add_ids, self.config):
            fights.append(fight)
            logger.debug(
                "Ended %s after %ds (perfect sync: %s)",
                fight.fight_name, fight.fight_duration, fight.perfect_sync,
            )
        else:
            logger.debug("Discarded %s: boss seen in too few slices", fight.fight_name)
        state.fight = None
        state.reset_activity()

    def _is_spurious_wipe(self, fight: FightData, slices: list[TimeSlice], i: int) -> bool:
        """Wipe guesses are wrong if the boss or its adds keep showing up."""
        boss_ids = set(fight.fight_unit_ids) | set(self._boss_add_ids(fight.fight_name))
        trigger_time = slices[i].time
        # Elapsed time keeps accumulating across long recording gaps too
        since_boss_seen = 0
        for u in range(i + 1, len(slices)):
            s = slices[u]
            since_boss_seen += s.time - slices[u - 1].time
            if (
                s.is_start_event_for(fight.fight_name)
                or s.time - trigger_time > self.config.wipe_scan_sec
            ):
                return since_boss_seen <= self.config.wipe_gap_sec
            if contains_fight(boss_ids, s):
                since_boss_seen = 0
            elif since_boss_seen > self.config.wipe_gap_sec:
                return False
        return False

    def _detect_perfect_sync(self, fight: FightData, slices: list[TimeSlice], i: int) -> bool:
        """Follow the fight's tail until combat visibly stops.

        Tail slices are added to the fight. Returns False when combat noise
        lasts for the whole sync window.
        """
        cfg = self.config
        trigger_time = slices[i].time
        for u in range(i + 1, len(slices) - 1):
            s = slices[u]
            nxt = slices[u + 1]
            if s.is_start_event():
                break
            fight.time_slices.append(s)
            elapsed = s.time - trigger_time
            if len(s.changed_unit_datas) < cfg.sync_min_active_units and elapsed > cfg.sync_settle_sec:
                return True
            if nxt.time - s.time > cfg.sync_gap_sec and elapsed < cfg.sync_gap_window_sec:
                return True
            active = count_active_units(nxt, s, cfg.sync_activity_threshold)
            if active < cfg.sync_min_active_units and elapsed > cfg.sync_settle_sec:
                return True
            if elapsed > cfg.sync_window_sec:
                return False
        return False

    # -- silent wipes --------------------------------------------------------

    def _check_timeout(
        self,
        state: _PassState,
        slices: list[TimeSlice],
        i: int,
        fights: list[FightData],
    ) -> None:
        if state.last_activity_slice is None:
            return
        curr = slices[i]
        timeout = self.config.timeout_sec
        if curr.time - state.last_activity_time <= timeout:
            return

        fight = state.fight
        if self.knowledge.is_disappearing(fight.fight_name):
            self._rescan_add_activity(state, slices, i)
            if curr.time - state.last_activity_time <= timeout:
                return

        fight.fight_duration = elapsed_seconds(
            fight.start_date_time, self.session.slice_datetime(state.last_activity_time),
        )
        fight.perfect_sync = False
        if fight.fight_duration > self.config.min_timeout_fight_sec:
            fights.append(fight)
            logger.debug("Timed out %s after %ds", fight.fight_name, fight.fight_duration)
        else:
            logger.debug(
                "Discarded %s: timed out after only %ds",
                fight.fight_name, fight.fight_duration,
            )
        state.fight = None
        state.reset_activity()

    def _rescan_add_activity(self, state: _PassState, slices: list[TimeSlice], i: int) -> None:
        """Move the last activity time up to the latest add counter change."""
        curr = slices[i]
        add_ids = [
            unit_id for unit_id in self._boss_add_ids(state.fight.fight_name)
            if unit_id in curr.unit_datas
        ]
        if not add_ids:
            return
        for u in range(i - 1, -1, -1):
            s = slices[u]
            if curr.time - s.time > self.config.add_rescan_sec:
                return
            for unit_id in add_ids:
                earlier = s.unit_datas.get(unit_id)
                if earlier is None:
                    continue
                later = curr.unit_datas[unit_id]
                if (
                    later.dmg != earlier.dmg
                    or later.dmg_taken != earlier.dmg_taken
                    or later.death != earlier.death
                ):
                    state.last_activity_time = s.time
                    return

    # -- per-slice bookkeeping ---------------------------------------------

    def _propagate_roster(self, state: _PassState, curr: TimeSlice) -> None:
        if curr.group_member_ids:
            state.roster = list(curr.group_member_ids)
        if state.roster is None:
            return
        for interval in (state.trash, state.fight):
            if interval is None or not interval.time_slices:
                continue
            first = interval.time_slices[0]
            if first.group_member_ids is None:
                interval.time_slices[0] = first.model_copy(
                    update={"group_member_ids": list(state.roster)},
                )

    def _track_activity(self, state: _PassState, curr: TimeSlice) -> None:
        unit_ids = state.fight.fight_unit_ids
        if not contains_fight(unit_ids, curr):
            return
        last = state.last_activity_slice
        if last is None or detect_activity(unit_ids, last, curr):
            state.last_activity_time = curr.time
        state.last_activity_slice = curr


def generate_fight_data(
    session: DamageDataSession,
    *,
    save_trash: bool = False,
    knowledge: BossKnowledge | None = None,
    settings: Settings | None = None,
) -> list[FightData]:
    return FightSegmenter(session, knowledge, settings).generate_fights(save_trash)
