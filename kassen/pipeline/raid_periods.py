from datetime import datetime

from kassen.session.models import RaidPeriodEntry
from kassen.utils import ensure_utc


class RaidPeriodNotFoundError(LookupError):
    pass


def fetch_relevant_raid_period(
    raid_id_data: dict[str, list[RaidPeriodEntry]],
    instance_name: str,
    at: datetime,
) -> RaidPeriodEntry:
    """Return the raid lockout that was active in ``instance_name`` at ``at``.

    Periods are stored ordered by increasing ``last_seen``. The first period
    last seen after ``at`` wins; past the end of the history the most recent
    one is used.
    """
    periods = raid_id_data.get(instance_name)
    if not periods:
        raise RaidPeriodNotFoundError(
            f"No raid period history for {instance_name!r}"
        )
    if len(periods) == 1:
        return periods[0]

    at = ensure_utc(at)
    for period in periods[:-1]:
        if ensure_utc(period.last_seen) > at:
            return period
    return periods[-1]
