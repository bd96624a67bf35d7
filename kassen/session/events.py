"""Event tag grammar for recorded time slices.

A slice's ``event`` string is a ``;``-joined list of ``Kind=Payload`` tags,
e.g. ``"Start=Ragnaros"`` or ``"Dead=The Prophet Skeram;BossHealth=The Prophet Skeram,0,412000"``.
Unknown kinds and malformed tags are ignored, never rejected.
"""

from dataclasses import dataclass

TAG_SEPARATOR = ";"

START = "Start"
DEAD = "Dead"
DEAD_YELL = "DeadYell"
WIPE = "Wipe"
ADD_DEAD = "AddDead"
BOSS_HEALTH = "BossHealth"

DEATH_KINDS: frozenset[str] = frozenset({DEAD, DEAD_YELL})
# Tag kinds whose payload is the boss the encounter state refers to
BOSS_STATE_KINDS: frozenset[str] = frozenset({START, DEAD, DEAD_YELL, WIPE})


@dataclass(frozen=True)
class EventTag:
    kind: str
    payload: str = ""


def parse_event(event: str) -> list[EventTag]:
    tags = []
    for raw in event.split(TAG_SEPARATOR):
        raw = raw.strip()
        if not raw:
            continue
        kind, _, payload = raw.partition("=")
        tags.append(EventTag(kind=kind.strip(), payload=payload.strip()))
    return tags


def is_start_event(event: str) -> bool:
    return any(tag.kind == START for tag in parse_event(event))


def is_dead_event(event: str) -> bool:
    return any(tag.kind in DEATH_KINDS for tag in parse_event(event))


def is_dead_yell_event(event: str) -> bool:
    return any(tag.kind == DEAD_YELL for tag in parse_event(event))


def is_wipe_event(event: str) -> bool:
    return any(tag.kind == WIPE for tag in parse_event(event))


def get_event_boss(event: str) -> str | None:
    """Boss named by the first start tag, if any."""
    for tag in parse_event(event):
        if tag.kind == START and tag.payload:
            return tag.payload
    return None


def is_event_boss(event: str, boss_name: str) -> bool:
    return any(
        tag.kind in BOSS_STATE_KINDS and tag.payload == boss_name
        for tag in parse_event(event)
    )


def is_start_event_for(event: str, boss_name: str) -> bool:
    return any(
        tag.kind == START and tag.payload == boss_name
        for tag in parse_event(event)
    )


def get_event_boss_health(event: str, boss_name: str) -> tuple[int, int] | None:
    """Return ``(health, max_health)`` reported for ``boss_name``, if present."""
    for tag in parse_event(event):
        if tag.kind != BOSS_HEALTH:
            continue
        parts = tag.payload.rsplit(",", 2)
        if len(parts) != 3 or parts[0].strip() != boss_name:
            continue
        try:
            return int(parts[1]), int(parts[2])
        except ValueError:
            continue
    return None


def rewrite_deaths_as_add_deaths(event: str) -> str:
    """Turn every death tag into a non-terminal add death, keeping other tags."""
    rewritten = []
    for raw in event.split(TAG_SEPARATOR):
        if raw.partition("=")[0].strip() in DEATH_KINDS:
            raw = ADD_DEAD + raw.strip()[len(DEAD):]
        rewritten.append(raw)
    return TAG_SEPARATOR.join(rewritten).rstrip(TAG_SEPARATOR)
