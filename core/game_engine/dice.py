"""
Two six-sided dice.
"""
import random
from dataclasses import dataclass

from shared.constants import DIE_FACES


@dataclass(frozen=True)
class DiceResult:
    """Faces shown by one throw of both dice."""
    die1: int
    die2: int

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    def to_list(self) -> list[int]:
        return [self.die1, self.die2]


class Dice:
    """
    Dice with a private random stream.

    Pass a seed for a reproducible game. Subclasses may override roll() to
    script the faces; roll_pair() always goes through it.
    """

    def __init__(self, seed: int | None = None, sides: int = DIE_FACES):
        self.sides = sides
        self._rng = random.Random(seed)

    def roll(self) -> int:
        """One die, 1..sides."""
        return self._rng.randint(1, self.sides)

    def roll_pair(self) -> DiceResult:
        """Throw both dice."""
        first = self.roll()
        return DiceResult(first, self.roll())

    def set_seed(self, seed: int | None) -> None:
        self._rng.seed(seed)
