import json
import logging
from pathlib import Path

from pydantic import TypeAdapter

from kassen.session.models import DamageDataSession, FightData

logger = logging.getLogger(__name__)

_FIGHT_LIST = TypeAdapter(list[FightData])


def load_session(path: Path) -> DamageDataSession:
    """Read one recorded session from a JSON file."""
    session = DamageDataSession.model_validate_json(path.read_text(encoding="utf-8"))
    logger.debug(
        "Loaded session %s: %d time slices, %d units",
        path.name, len(session.time_slices), len(session.unit_id_to_names),
    )
    return session


def dump_fights(fights: list[FightData]) -> str:
    data = _FIGHT_LIST.dump_python(fights, mode="json", by_alias=True)
    return json.dumps(data, indent=2)


def write_fights(fights: list[FightData], path: Path) -> None:
    path.write_text(dump_fights(fights), encoding="utf-8")
    logger.info("Wrote %d fights to %s", len(fights), path)
