"""Membership and activity predicates over time slices.

Both predicates take an explicit participant set so they can be evaluated
for any candidate encounter, not only the one currently being recorded.
"""

from collections.abc import Iterable

from kassen.session.models import TimeSlice, UnitData


def contains_fight(unit_ids: Iterable[int], time_slice: TimeSlice) -> bool:
    """True if the slice changed counters of any of ``unit_ids``."""
    changed = time_slice.changed_unit_datas
    return any(unit_id in changed for unit_id in unit_ids)


def detect_activity(unit_ids: Iterable[int], prev: TimeSlice, curr: TimeSlice) -> bool:
    """True if any of ``unit_ids`` dealt/took damage, healed or died between slices."""
    for unit_id in unit_ids:
        before = prev.unit_datas.get(unit_id)
        after = curr.unit_datas.get(unit_id)
        if before is None or after is None:
            continue
        if (
            after.dmg != before.dmg
            or after.dmg_taken != before.dmg_taken
            or after.eff_heal != before.eff_heal
            or after.death != before.death
        ):
            return True
    return False


def delta_unit_datas(
    later: TimeSlice, earlier: TimeSlice, *, only_changed: bool = False,
) -> dict[int, UnitData]:
    """Per-unit counter deltas from ``earlier`` to ``later``.

    Units missing from ``earlier`` are measured from zero. With
    ``only_changed`` the result is limited to units flagged as changed in
    ``later``.
    """
    result = {}
    for unit_id, after in later.unit_datas.items():
        if only_changed and unit_id not in later.changed_unit_datas:
            continue
        result[unit_id] = after.delta(earlier.unit_datas.get(unit_id))
    return result


def count_active_units(later: TimeSlice, earlier: TimeSlice, threshold: int) -> int:
    """Units whose damage or effective healing grew by more than ``threshold``."""
    deltas = delta_unit_datas(later, earlier, only_changed=True)
    return sum(
        1 for d in deltas.values()
        if d.dmg > threshold or d.eff_heal > threshold
    )


def count_slices_containing(unit_ids: Iterable[int], time_slices: Iterable[TimeSlice]) -> int:
    ids = frozenset(unit_ids)
    return sum(1 for s in time_slices if not ids.isdisjoint(s.changed_unit_datas))
