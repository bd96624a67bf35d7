"""Per-encounter special cases for fight segmentation.

Kept as tables so the segmentation loop stays generic.
"""

from dataclasses import dataclass

from kassen.session.models import TimeSlice


@dataclass(frozen=True)
class FakeDeathRule:
    """Boss whose death tag fires for images/clones as well as the real boss.

    A death only counts when the boss yelled on death, or when it was tagged
    with zero health on a unit whose max health proves it is the real boss.
    """

    boss_name: str
    min_max_health: int  # Max health strictly above this = real boss

    def is_real_death(self, time_slice: TimeSlice) -> bool:
        if time_slice.is_dead_yell_event():
            return True
        health = time_slice.event_boss_health(self.boss_name)
        if health is None:
            return False
        current, maximum = health
        return current <= 0 and maximum > self.min_max_health


@dataclass(frozen=True)
class ConflictBias:
    """Score bonus for a challenger start tag seen while another boss is open."""

    current: str
    challenger: str
    bonus: int


FAKE_DEATH_RULES: dict[str, FakeDeathRule] = {
    # Skeram's images die with the same death tag as the prophet himself
    "The Prophet Skeram": FakeDeathRule("The Prophet Skeram", min_max_health=400000),
}

CONFLICT_BIASES: dict[tuple[str, str], ConflictBias] = {
    # Ragnaros is summoned by talking to Majordomo right after his encounter
    ("Majordomo Executus", "Ragnaros"): ConflictBias(
        "Majordomo Executus", "Ragnaros", bonus=10,
    ),
}


def conflict_bonus(
    current: str,
    challenger: str,
    biases: dict[tuple[str, str], ConflictBias] = CONFLICT_BIASES,
) -> int:
    bias = biases.get((current, challenger))
    return bias.bonus if bias else 0
