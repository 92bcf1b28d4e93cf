"""
Payoff rule for the Prisoner's Dilemma fishbowl
Moves, the payoff matrix and the per-round record each agent keeps
"""

from dataclasses import dataclass
from enum import Enum


class Move(str, Enum):
    """A single round's choice"""
    COOPERATE = 'C'
    DEFECT = 'D'

    def opposite(self) -> "Move":
        return Move.DEFECT if self is Move.COOPERATE else Move.COOPERATE

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PayoffMatrix:
    """Reward (R), temptation (T), punishment (P) and sucker's payoff (S)"""
    R: int = 3
    T: int = 5
    P: int = 1
    S: int = 0

    def __post_init__(self):
        if not (self.T > self.R > self.P > self.S):
            raise ValueError(
                f"Payoffs must satisfy T > R > P > S, got "
                f"T={self.T}, R={self.R}, P={self.P}, S={self.S}"
            )

    def payoff(self, move_self: Move, move_opponent: Move) -> int:
        if move_self == Move.COOPERATE:
            return self.R if move_opponent == Move.COOPERATE else self.S
        return self.T if move_opponent == Move.COOPERATE else self.P

    def as_dict(self) -> dict:
        return {'R': self.R, 'T': self.T, 'P': self.P, 'S': self.S}


# Reference matrix used everywhere unless a caller passes its own
PD = PayoffMatrix(R=3, T=5, P=1, S=0)


@dataclass(frozen=True)
class RoundRecord:
    """One agent's view of a completed round"""
    self_move: Move
    opponent_move: Move
    payoff: int


def calculate_payoff(move_self: Move, move_opponent: Move, matrix: PayoffMatrix = PD) -> int:
    """Payoff earned by the player choosing move_self against move_opponent"""
    return matrix.payoff(move_self, move_opponent)
