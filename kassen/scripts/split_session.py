"""CLI script to split recorded raid sessions into fights."""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from kassen.config import Settings, get_settings
from kassen.pipeline.segmentation import generate_fight_data
from kassen.session.loader import dump_fights, load_session, write_fights

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Split recorded sessions into fights")
    parser.add_argument("sessions", nargs="+", type=Path, help="Session JSON files")
    parser.add_argument(
        "--save-trash", action="store_true", default=None,
        help="Also keep significant trash intervals between bosses",
    )
    parser.add_argument(
        "--output", type=Path,
        help="Directory for <session>.fights.json files (default: stdout)",
    )
    return parser.parse_args(argv)


def log_level(settings: Settings) -> str:
    return "DEBUG" if settings.debug else settings.log_level


def run(
    sessions: list[Path], *, save_trash: bool = False, output: Path | None = None,
) -> int:
    """Segment each session independently. Returns the number of failures."""
    settings = get_settings()
    failures = 0
    for path in sessions:
        try:
            session = load_session(path)
        except (OSError, ValidationError):
            logger.exception("Failed to load session %s", path)
            failures += 1
            continue

        fights = generate_fight_data(session, save_trash=save_trash, settings=settings)
        for fight in fights:
            logger.info(
                "%s: %s at %s, %ds, raid ID %d, perfect sync %s",
                path.name, fight.fight_name, fight.start_date_time.isoformat(),
                fight.fight_duration, fight.raid_id, fight.perfect_sync,
            )

        if output is None:
            print(dump_fights(fights))
        else:
            output.mkdir(parents=True, exist_ok=True)
            write_fights(fights, output / f"{path.stem}.fights.json")
    return failures


def main() -> None:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=log_level(settings))
    save_trash = settings.save_trash if args.save_trash is None else args.save_trash
    failures = run(args.sessions, save_trash=save_trash, output=args.output)
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
