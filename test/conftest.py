import random
from typing import List

import matplotlib
import pytest

from ipd_fishbowl.payoffs import PD, Move, RoundRecord
from ipd_fishbowl.strategies import Strategy

matplotlib.use("Agg")


class FixedRandom(random.Random):
    """random.Random whose random() always returns the same value"""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class ScriptedStrategy(Strategy):
    """Plays a fixed sequence of moves, repeating the last one when it runs out"""
    strategy_id = "SCRIPTED"
    name = "Scripted"

    def __init__(self, moves: List[Move]):
        super().__init__(random.Random(0))
        self.moves = list(moves)
        self.round_calls = 0
        self.match_calls = 0
        self.reset_calls = 0

    def decide(self, history: List[RoundRecord]) -> Move:
        index = min(len(history), len(self.moves) - 1)
        return self.moves[index]

    def on_round_complete(self, record, history):
        self.round_calls += 1

    def on_match_complete(self, history):
        self.match_calls += 1

    def reset_match(self):
        self.reset_calls += 1


def make_history(pairs, matrix=PD) -> List[RoundRecord]:
    """Build a history from 'CD'-style strings of (own move, opponent move)"""
    return [
        RoundRecord(self_move=Move(own), opponent_move=Move(opp),
                    payoff=matrix.payoff(Move(own), Move(opp)))
        for own, opp in pairs
    ]


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest.fixture
def scripted():
    return ScriptedStrategy


@pytest.fixture
def history():
    return make_history
