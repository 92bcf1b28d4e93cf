"""
Match engine for the fishbowl
Plays iterated matches between two strategies and schedules random pairings over a roster
"""

import random
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Tuple

from tqdm import tqdm

from .payoffs import PD, Move, PayoffMatrix, RoundRecord
from .roster import Roster
from .strategies import Strategy

ITERATED_LENGTH = 20


@dataclass
class MatchResult:
    """Result of a single match between two strategies"""
    score_a: int
    score_b: int
    history_a: List[RoundRecord] = field(default_factory=list)
    history_b: List[RoundRecord] = field(default_factory=list)

    @property
    def rounds_played(self) -> int:
        return len(self.history_a)

    @property
    def moves_a(self) -> List[Move]:
        return [r.self_move for r in self.history_a]

    @property
    def moves_b(self) -> List[Move]:
        return [r.self_move for r in self.history_b]

    def to_dict(self) -> Dict:
        return {
            'moves': [(a.value, b.value) for a, b in zip(self.moves_a, self.moves_b)],
            'scores': (self.score_a, self.score_b),
            'rounds': self.rounds_played,
        }


def play_match(strategy_a: Strategy, strategy_b: Strategy, rounds: int = ITERATED_LENGTH,
               payoff_matrix: PayoffMatrix = PD) -> MatchResult:
    """Run a single match between two strategies"""
    if rounds <= 0:
        return MatchResult(score_a=0, score_b=0)

    strategy_a.reset_match()
    strategy_b.reset_match()

    history_a: List[RoundRecord] = []
    history_b: List[RoundRecord] = []
    score_a = 0
    score_b = 0

    for _ in range(rounds):
        move_a = strategy_a.decide(history_a.copy())
        move_b = strategy_b.decide(history_b.copy())

        payoff_a = payoff_matrix.payoff(move_a, move_b)
        payoff_b = payoff_matrix.payoff(move_b, move_a)
        score_a += payoff_a
        score_b += payoff_b

        record_a = RoundRecord(self_move=move_a, opponent_move=move_b, payoff=payoff_a)
        record_b = RoundRecord(self_move=move_b, opponent_move=move_a, payoff=payoff_b)
        history_a.append(record_a)
        history_b.append(record_b)

        # Update adaptive agents
        strategy_a.on_round_complete(record_a, history_a)
        strategy_b.on_round_complete(record_b, history_b)

    strategy_a.on_match_complete(history_a)
    strategy_b.on_match_complete(history_b)

    return MatchResult(score_a=score_a, score_b=score_b, history_a=history_a, history_b=history_b)


@dataclass(frozen=True)
class InteractionEvent:
    """Summary of one completed match for the presentation layer"""
    agent_a_name: str
    agent_b_name: str
    last_move_a: Optional[Move]
    last_move_b: Optional[Move]
    payoff_a: int
    payoff_b: int
    tick: int
    match_score_a: int = 0
    match_score_b: int = 0

    def to_dict(self) -> Dict:
        return {
            'tick': self.tick,
            'agent_a': self.agent_a_name,
            'agent_b': self.agent_b_name,
            'last_move_a': self.last_move_a.value if self.last_move_a else None,
            'last_move_b': self.last_move_b.value if self.last_move_b else None,
            'payoff_a': self.payoff_a,
            'payoff_b': self.payoff_b,
            'match_score_a': self.match_score_a,
            'match_score_b': self.match_score_b,
        }


@dataclass
class StepResult:
    """Everything one scheduler tick produced"""
    event: InteractionEvent
    match: MatchResult
    index_a: int
    index_b: int
    score_a: float
    score_b: float


EventListener = Callable[[InteractionEvent], None]


class Scheduler:
    """Repeatedly pairs two distinct agents and applies the match outcome to the roster"""

    def __init__(self, roster: Roster, rounds: int = ITERATED_LENGTH,
                 rng: Optional[random.Random] = None, payoff_matrix: PayoffMatrix = PD,
                 log_size: int = 12, chart_size: int = 40, chart_top_n: int = 6,
                 verbose: bool = False):
        self.roster = roster
        self.rounds = rounds
        self.rng = rng if rng is not None else roster.rng
        self.payoff_matrix = payoff_matrix
        for agent in roster:
            agent.strategy.set_payoff_matrix(payoff_matrix)
        self.chart_top_n = chart_top_n
        self.verbose = verbose
        self.tick = 0
        self.log: Deque[str] = deque(maxlen=log_size)
        self.chart_history: Deque[Dict] = deque(maxlen=chart_size)
        self.events: List[InteractionEvent] = []
        self._listeners: List[EventListener] = []
        self._in_step = False

    def subscribe(self, listener: EventListener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener):
        self._listeners.remove(listener)

    def select_pair(self) -> Tuple[int, int]:
        """Two distinct indices drawn uniformly, redrawing the second on collision"""
        n = len(self.roster)
        i = self.rng.randrange(n)
        j = self.rng.randrange(n)
        while j == i:
            j = self.rng.randrange(n)
        return i, j

    def _check_pair(self, pair: Tuple[int, int]) -> Tuple[int, int]:
        i, j = pair
        n = len(self.roster)
        if not (0 <= i < n and 0 <= j < n):
            raise ValueError(f"Agent indices {pair} out of range for roster of {n}")
        if i == j:
            raise ValueError(f"An agent cannot play itself (index {i})")
        return i, j

    def step(self, pair: Optional[Tuple[int, int]] = None) -> Optional[StepResult]:
        """Advance the simulation by exactly one match"""
        if len(self.roster) < 2:
            return None
        if self._in_step:
            raise RuntimeError("Scheduler.step() called while a tick is already in progress")

        self._in_step = True
        try:
            i, j = self._check_pair(pair) if pair is not None else self.select_pair()
            agent_a = self.roster[i]
            agent_b = self.roster[j]

            match = play_match(agent_a.strategy, agent_b.strategy, self.rounds, self.payoff_matrix)

            agent_a.record_match(match.score_a, match.history_a)
            agent_b.record_match(match.score_b, match.history_b)

            last_a = match.history_a[-1] if match.history_a else None
            last_b = match.history_b[-1] if match.history_b else None
            event = InteractionEvent(
                agent_a_name=agent_a.name,
                agent_b_name=agent_b.name,
                last_move_a=last_a.self_move if last_a else None,
                last_move_b=last_b.self_move if last_b else None,
                payoff_a=last_a.payoff if last_a else 0,
                payoff_b=last_b.payoff if last_b else 0,
                tick=self.tick,
                match_score_a=match.score_a,
                match_score_b=match.score_b,
            )

            entry = f"{agent_a.name} vs {agent_b.name}: {match.score_a} - {match.score_b}"
            self.log.appendleft(entry)
            self.events.append(event)
            if self.verbose:
                print(entry)

            self.tick += 1
            self._record_chart_point()

            for listener in list(self._listeners):
                listener(event)
        finally:
            self._in_step = False

        return StepResult(event=event, match=match, index_a=i, index_b=j,
                          score_a=agent_a.score, score_b=agent_b.score)

    def _record_chart_point(self):
        leaders = self.roster.leaderboard(self.chart_top_n)
        self.chart_history.append({
            'tick': self.tick,
            'scores': {agent.name: agent.score for agent in leaders},
        })

    def run(self, ticks: int, progress: bool = False) -> List[StepResult]:
        """Run several ticks back to back"""
        results = []
        for _ in tqdm(range(ticks), desc="Running matches", disable=not progress):
            result = self.step()
            if result is None:
                break
            results.append(result)
        return results

    def reset(self, reinitialize_learning: bool = False):
        """Start a new run on the same roster"""
        self.roster.reset(reinitialize_learning=reinitialize_learning)
        self.tick = 0
        self.log.clear()
        self.chart_history.clear()
        self.events.clear()
