"""Read-only boss knowledge base injected into the segmentation engine."""

import logging
from dataclasses import dataclass, field

from kassen.pipeline import constants
from kassen.pipeline.boss_rules import (
    CONFLICT_BIASES,
    FAKE_DEATH_RULES,
    ConflictBias,
    FakeDeathRule,
    conflict_bonus,
)
from kassen.session.models import DamageDataSession

logger = logging.getLogger(__name__)


class UnresolvedBossError(Exception):
    """A boss start tag could not be turned into a set of unit IDs."""


@dataclass(frozen=True)
class BossKnowledge:
    instances: dict[str, str] = field(default_factory=dict)
    parts: dict[str, tuple[str, ...]] = field(default_factory=dict)
    disappearing: frozenset[str] = frozenset()
    adds: dict[str, tuple[str, ...]] = field(default_factory=dict)
    fake_deaths: dict[str, FakeDeathRule] = field(default_factory=dict)
    conflict_biases: dict[tuple[str, str], ConflictBias] = field(default_factory=dict)

    def instance_of(self, boss_name: str) -> str:
        try:
            return self.instances[boss_name]
        except KeyError:
            raise UnresolvedBossError(
                f"No instance known for boss {boss_name!r}"
            ) from None

    def body_parts(self, boss_name: str) -> tuple[str, ...] | None:
        return self.parts.get(boss_name)

    def is_disappearing(self, boss_name: str) -> bool:
        return boss_name in self.disappearing

    def adds_of(self, boss_name: str) -> tuple[str, ...]:
        return self.adds.get(boss_name, ())

    def fake_death_rule(self, boss_name: str) -> FakeDeathRule | None:
        return self.fake_deaths.get(boss_name)

    def conflict_bonus(self, current: str, challenger: str) -> int:
        return conflict_bonus(current, challenger, self.conflict_biases)

    def resolve_fight_unit_ids(
        self, boss_name: str, session: DamageDataSession,
    ) -> tuple[int, ...]:
        """Unit IDs of the bodies making up ``boss_name`` in this session.

        Uses the body-part table when the boss has one, the boss name itself
        otherwise. Raises UnresolvedBossError when nothing resolves.
        """
        names = self.body_parts(boss_name) or (boss_name,)
        unit_ids = []
        for name in names:
            unit_id = session.unit_id(name)
            if unit_id is not None:
                unit_ids.append(unit_id)
        if not unit_ids:
            raise UnresolvedBossError(
                f"Could not find boss {boss_name!r} in unit ID table"
            )
        return tuple(unit_ids)

    def resolve_add_unit_ids(
        self, boss_name: str, session: DamageDataSession,
    ) -> tuple[int, ...]:
        unit_ids = []
        for name in self.adds_of(boss_name):
            unit_id = session.unit_id(name)
            if unit_id is not None:
                unit_ids.append(unit_id)
            else:
                logger.debug("Add %r of %s not seen in session", name, boss_name)
        return tuple(unit_ids)


def default_knowledge() -> BossKnowledge:
    return BossKnowledge(
        instances=dict(constants.BOSS_INSTANCES),
        parts=dict(constants.BOSS_PARTS),
        disappearing=constants.DISAPPEARING_BOSSES,
        adds=dict(constants.BOSS_ADDS),
        fake_deaths=dict(FAKE_DEATH_RULES),
        conflict_biases=dict(CONFLICT_BIASES),
    )
