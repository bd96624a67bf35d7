"""Keep/discard decisions and payload trimming for finished fights."""

import logging
from collections.abc import Iterable

from kassen.config import SegmentationConfig, TrashConfig
from kassen.pipeline.activity import count_slices_containing, delta_unit_datas
from kassen.session.models import FightData

logger = logging.getLogger(__name__)


def is_significant_trash(trash: FightData, config: TrashConfig) -> bool:
    """Trash is worth keeping only if it was long, busy and damaging."""
    if trash.fight_duration <= config.min_duration_sec or not trash.time_slices:
        return False
    busy_slices = sum(
        1 for s in trash.time_slices
        if len(s.changed_unit_datas) > config.busy_slice_units
    )
    if busy_slices <= config.min_busy_slices:
        return False
    deltas = delta_unit_datas(trash.time_slices[-1], trash.time_slices[0])
    total_damage = sum(d.dmg for d in deltas.values())
    return total_damage > config.min_damage


def has_enough_boss_slices(
    fight: FightData,
    add_unit_ids: Iterable[int] | None,
    config: SegmentationConfig,
) -> bool:
    """Boss fights need the boss in enough slices to be real.

    ``add_unit_ids`` is given for disappearing bosses only; they get a second
    chance counting the adds too, against a higher threshold.
    """
    boss_slices = count_slices_containing(fight.fight_unit_ids, fight.time_slices)
    if boss_slices >= config.min_participant_slices:
        return True
    if add_unit_ids is None:
        return False
    ids = set(fight.fight_unit_ids) | set(add_unit_ids)
    return count_slices_containing(ids, fight.time_slices) >= config.min_add_slices


def remove_unnecessary_units(fight: FightData) -> None:
    """Drop unit entries that are neither boss parts nor raid members.

    Slices are replaced by trimmed copies; a slice may also belong to the
    neighbouring trash interval.
    """
    keep = set(fight.fight_unit_ids)
    for s in fight.time_slices:
        if s.group_member_ids:
            keep.update(s.group_member_ids)

    trimmed = []
    for s in fight.time_slices:
        trimmed.append(s.model_copy(update={
            "unit_datas": {
                unit_id: data
                for unit_id, data in s.unit_datas.items()
                if unit_id in keep
            },
            "changed_unit_datas": s.changed_unit_datas & keep,
        }))
    fight.time_slices = trimmed
    logger.debug(
        "Trimmed %s to %d units across %d slices",
        fight.fight_name, len(keep), len(trimmed),
    )
