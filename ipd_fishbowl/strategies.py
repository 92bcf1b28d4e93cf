"""
Strategy implementations for the IPD fishbowl
Classic fixed-rule strategies plus the small set of adaptive learners
"""

import random
from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Tuple

import numpy as np

from .payoffs import PD, Move, PayoffMatrix, RoundRecord


class Strategy(ABC):
    """Base class for all fishbowl strategies

    `decide` only ever sees the calling agent's own view of the current match.
    Learners override the hooks below; fixed strategies inherit the no-ops.
    """

    strategy_id: str = "BASE"
    name: str = "Strategy"
    is_adaptive: bool = False

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    @abstractmethod
    def decide(self, history: List[RoundRecord]) -> Move:
        """Return the move for the next round"""

    def on_round_complete(self, record: RoundRecord, history: List[RoundRecord]):
        """Called after every round; history already contains record"""

    def on_match_complete(self, history: List[RoundRecord]):
        """Called once after the final round of a match"""

    def reset_match(self):
        """Reset per-match state before a new match"""

    def reset_learning(self):
        """Reinitialize learned parameters"""

    def set_payoff_matrix(self, payoff_matrix: PayoffMatrix):
        """Adopt the matrix the strategy's matches are scored with"""

    def describe_state(self) -> Dict:
        return {}

    def summary(self) -> str:
        """One-line description of the current behaviour for tooltips"""
        return "Fixed strategy - behavior never changes"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _opponent_moves(history: List[RoundRecord]) -> List[Move]:
    return [r.opponent_move for r in history]


# Classic strategies
class AlwaysCooperate(Strategy):
    """Always cooperates"""
    strategy_id = "C_ALWAYS"
    name = "Always Cooperate"

    def decide(self, history: List[RoundRecord]) -> Move:
        return Move.COOPERATE


class AlwaysDefect(Strategy):
    """Always defects"""
    strategy_id = "D_ALWAYS"
    name = "Always Defect"

    def decide(self, history: List[RoundRecord]) -> Move:
        return Move.DEFECT


class TitForTat(Strategy):
    """Cooperates first, then copies opponent's last move"""
    strategy_id = "TFT"
    name = "Tit for Tat"

    def decide(self, history: List[RoundRecord]) -> Move:
        if not history:
            return Move.COOPERATE
        return history[-1].opponent_move


class GenerousTitForTat(Strategy):
    """Tit-for-Tat with forgiveness probability"""
    strategy_id = "GTFT"
    name = "Generous Tit-for-Tat"

    def __init__(self, rng: Optional[random.Random] = None, forgiveness_prob: float = 0.1):
        super().__init__(rng)
        self.forgiveness_prob = forgiveness_prob

    def decide(self, history: List[RoundRecord]) -> Move:
        if not history:
            return Move.COOPERATE
        if history[-1].opponent_move == Move.DEFECT:
            if self.rng.random() < self.forgiveness_prob:
                return Move.COOPERATE
            return Move.DEFECT
        return Move.COOPERATE


class GrimTrigger(Strategy):
    """Cooperates until opponent defects, then always defects"""
    strategy_id = "GRIM"
    name = "Grim Trigger"

    def decide(self, history: List[RoundRecord]) -> Move:
        # Scans the whole match so the trigger can never be undone
        if any(r.opponent_move == Move.DEFECT for r in history):
            return Move.DEFECT
        return Move.COOPERATE


class Random(Strategy):
    """Randomly cooperates or defects"""
    strategy_id = "RANDOM"
    name = "Random"

    def __init__(self, rng: Optional[random.Random] = None, p_cooperate: float = 0.5):
        super().__init__(rng)
        self.p_cooperate = p_cooperate

    def decide(self, history: List[RoundRecord]) -> Move:
        return Move.COOPERATE if self.rng.random() < self.p_cooperate else Move.DEFECT


class Pavlov(Strategy):
    """Win-Stay-Lose-Shift: repeat after R or T, switch after P or S

    R and T are exactly the rounds where the opponent cooperated, so the rule
    holds under any payoff matrix.
    """
    strategy_id = "PAVLOV"
    name = "Pavlov (Win-Stay, Lose-Shift)"

    def decide(self, history: List[RoundRecord]) -> Move:
        if not history:
            return Move.COOPERATE
        last = history[-1]
        if last.opponent_move == Move.COOPERATE:
            return last.self_move
        return last.self_move.opposite()


# Adaptive Learning Strategies
class ProbabilisticReinforcement(Strategy):
    """Cooperation probabilities conditioned on the opponent's last move,
    reinforced once per match toward whichever own move paid better.
    """
    strategy_id = "ADAPTIVE"
    name = "Adaptive"
    is_adaptive = True

    def __init__(self, rng: Optional[random.Random] = None, learning_rate: float = 0.06,
                 defect_rate_scale: float = 0.6, jitter: float = 0.01):
        super().__init__(rng)
        self.learning_rate = learning_rate
        self.defect_rate_scale = defect_rate_scale
        self.jitter = jitter
        self.reset_learning()

    def reset_learning(self):
        self.p_after_cooperate = 0.45 + self.rng.random() * 0.1
        self.p_after_defect = 0.45 + self.rng.random() * 0.1

    def decide(self, history: List[RoundRecord]) -> Move:
        if not history or history[-1].opponent_move == Move.COOPERATE:
            p = self.p_after_cooperate
        else:
            p = self.p_after_defect
        return Move.COOPERATE if self.rng.random() < p else Move.DEFECT

    def on_match_complete(self, history: List[RoundRecord]):
        if not history:
            return
        coop_rewards = [r.payoff for r in history if r.self_move == Move.COOPERATE]
        defect_rewards = [r.payoff for r in history if r.self_move == Move.DEFECT]
        avg_c = float(np.mean(coop_rewards)) if coop_rewards else 0.0
        avg_d = float(np.mean(defect_rewards)) if defect_rewards else 0.0

        # Positive advantage pushes toward cooperation, negative toward defection
        advantage = avg_c - avg_d
        if advantage != 0:
            step = self.learning_rate * advantage
            self.p_after_cooperate = float(np.clip(self.p_after_cooperate + step, 0.01, 0.98))
            self.p_after_defect = float(np.clip(
                self.p_after_defect + step * self.defect_rate_scale, 0.01, 0.98))

        self.p_after_cooperate = float(np.clip(
            self.p_after_cooperate + self.rng.uniform(-self.jitter, self.jitter), 0.01, 0.99))
        self.p_after_defect = float(np.clip(
            self.p_after_defect + self.rng.uniform(-self.jitter, self.jitter), 0.01, 0.99))

    def describe_state(self) -> Dict:
        return {
            'p_after_cooperate': self.p_after_cooperate,
            'p_after_defect': self.p_after_defect,
        }

    def summary(self) -> str:
        return (f"Current Policy: P(coop|opponent cooperated) = {self.p_after_cooperate:.3f}, "
                f"P(coop|opponent defected) = {self.p_after_defect:.3f}")


class QLearner(Strategy):
    """Q-learning agent keyed on the opponent's last three moves"""
    strategy_id = "QLEARN"
    name = "Q-Learning Agent"
    is_adaptive = True

    START_STATE = "START"
    WINDOW = 3

    def __init__(self, rng: Optional[random.Random] = None, alpha: float = 0.1,
                 gamma: float = 0.9, epsilon: float = 0.1):
        super().__init__(rng)
        self.alpha = alpha  # Learning rate
        self.gamma = gamma  # Discount factor
        self.epsilon = epsilon  # Exploration rate
        self.q_table: Dict[Tuple[str, Move], float] = {}

    def reset_learning(self):
        self.q_table = {}

    def _get_state(self, history: List[RoundRecord]) -> str:
        if len(history) < self.WINDOW:
            return self.START_STATE
        return "".join(r.opponent_move.value for r in history[-self.WINDOW:])

    def _get_q_value(self, state: str, action: Move) -> float:
        return self.q_table.get((state, action), 0.0)

    def decide(self, history: List[RoundRecord]) -> Move:
        if self.rng.random() < self.epsilon:
            return self.rng.choice([Move.COOPERATE, Move.DEFECT])
        state = self._get_state(history)
        q_c = self._get_q_value(state, Move.COOPERATE)
        q_d = self._get_q_value(state, Move.DEFECT)
        return Move.COOPERATE if q_c >= q_d else Move.DEFECT

    def on_round_complete(self, record: RoundRecord, history: List[RoundRecord]):
        state = self._get_state(history[:-1])
        next_state = self._get_state(history)
        current_q = self._get_q_value(state, record.self_move)
        max_next_q = max(self._get_q_value(next_state, Move.COOPERATE),
                         self._get_q_value(next_state, Move.DEFECT))
        self.q_table[(state, record.self_move)] = current_q + self.alpha * (
            record.payoff + self.gamma * max_next_q - current_q)

    def describe_state(self) -> Dict:
        values = list(self.q_table.values())
        return {
            'states_seen': len({state for state, _ in self.q_table}),
            'q_min': min(values) if values else 0.0,
            'q_max': max(values) if values else 0.0,
        }

    def summary(self) -> str:
        state = self.describe_state()
        return (f"Q-table: {state['states_seen']} states, "
                f"values {state['q_min']:.2f} to {state['q_max']:.2f}")


class FrequencyAnalyzer(Strategy):
    """Cooperates while the opponent's cooperation rate stays above a threshold"""
    strategy_id = "FREQ"
    name = "Frequency Analyzer"
    is_adaptive = True

    def __init__(self, rng: Optional[random.Random] = None, warmup_rounds: int = 5,
                 threshold: float = 0.6):
        super().__init__(rng)
        self.warmup_rounds = warmup_rounds
        self.threshold = threshold
        self.last_rate: Optional[float] = None

    def reset_match(self):
        self.last_rate = None

    def decide(self, history: List[RoundRecord]) -> Move:
        if len(history) < self.warmup_rounds:
            return Move.COOPERATE
        opponent_moves = _opponent_moves(history)
        self.last_rate = opponent_moves.count(Move.COOPERATE) / len(opponent_moves)
        return Move.COOPERATE if self.last_rate > self.threshold else Move.DEFECT

    def describe_state(self) -> Dict:
        return {'opponent_cooperation_rate': self.last_rate, 'threshold': self.threshold}

    def summary(self) -> str:
        if self.last_rate is None:
            return f"Observing opponent (threshold {self.threshold:.0%})"
        return f"Opponent cooperation rate {self.last_rate:.0%} (threshold {self.threshold:.0%})"


class PatternDetector(Strategy):
    """Predicts the opponent's next move from previously seen move sequences"""
    strategy_id = "PATTERN"
    name = "Pattern Detective"
    is_adaptive = True

    def __init__(self, rng: Optional[random.Random] = None, warmup_rounds: int = 4,
                 min_length: int = 2, max_length: int = 4):
        super().__init__(rng)
        self.warmup_rounds = warmup_rounds
        self.min_length = min_length
        self.max_length = max_length
        self.patterns: Dict[Tuple[Move, ...], Counter] = defaultdict(Counter)

    def reset_learning(self):
        self.patterns = defaultdict(Counter)

    def predict(self, opponent_moves: List[Move]) -> Optional[Move]:
        """Most frequent follow-up of the longest known recent sequence"""
        for length in range(self.max_length, self.min_length - 1, -1):
            if len(opponent_moves) < length:
                continue
            key = tuple(opponent_moves[-length:])
            followers = self.patterns.get(key)
            if followers:
                if followers[Move.DEFECT] > followers[Move.COOPERATE]:
                    return Move.DEFECT
                return Move.COOPERATE
        return None

    def decide(self, history: List[RoundRecord]) -> Move:
        if len(history) < self.warmup_rounds:
            return Move.COOPERATE
        predicted = self.predict(_opponent_moves(history))
        if predicted == Move.DEFECT:
            return Move.DEFECT
        return Move.COOPERATE

    def on_round_complete(self, record: RoundRecord, history: List[RoundRecord]):
        opponent_moves = _opponent_moves(history)
        follow_up = opponent_moves[-1]
        for length in range(self.min_length, self.max_length + 1):
            if len(opponent_moves) > length:
                self.patterns[tuple(opponent_moves[-length - 1:-1])][follow_up] += 1

    def describe_state(self) -> Dict:
        return {
            'patterns_known': len(self.patterns),
            'observations': sum(sum(c.values()) for c in self.patterns.values()),
        }

    def summary(self) -> str:
        state = self.describe_state()
        return f"Known patterns: {state['patterns_known']} ({state['observations']} observations)"


class MetaStrategist(Strategy):
    """Switches among sub-strategies according to their running average payoff"""
    strategy_id = "META"
    name = "Meta-Strategist"
    is_adaptive = True

    def __init__(self, rng: Optional[random.Random] = None, switch_every: int = 10,
                 payoff_matrix: PayoffMatrix = PD, initial: str = "TitForTat"):
        super().__init__(rng)
        self.switch_every = switch_every
        self.payoff_matrix = payoff_matrix
        self.initial = initial
        self.sub_strategies: Dict[str, Strategy] = {
            "Cooperate": AlwaysCooperate(self.rng),
            "Defect": AlwaysDefect(self.rng),
            "TitForTat": TitForTat(self.rng),
            "FrequencyAnalyzer": FrequencyAnalyzer(self.rng),
        }
        if initial not in self.sub_strategies:
            raise ValueError(f"Unknown sub-strategy '{initial}'")
        self.reset_learning()

    def reset_learning(self):
        self.current_strategy = self.initial
        self.stats: Dict[str, List[float]] = {key: [0.0, 0] for key in self.sub_strategies}

    def reset_match(self):
        for strategy in self.sub_strategies.values():
            strategy.reset_match()

    def set_payoff_matrix(self, payoff_matrix: PayoffMatrix):
        self.payoff_matrix = payoff_matrix

    def average_payoff(self, key: str) -> float:
        total, count = self.stats[key]
        # Untried sub-strategies are assumed to earn mutual-cooperation reward
        return total / count if count else float(self.payoff_matrix.R)

    def best_strategy(self) -> str:
        best = self.current_strategy
        best_avg = self.average_payoff(best)
        for key in self.sub_strategies:
            avg = self.average_payoff(key)
            if avg > best_avg:
                best, best_avg = key, avg
        return best

    def decide(self, history: List[RoundRecord]) -> Move:
        return self.sub_strategies[self.current_strategy].decide(history)

    def on_round_complete(self, record: RoundRecord, history: List[RoundRecord]):
        stats = self.stats[self.current_strategy]
        stats[0] += record.payoff
        stats[1] += 1
        if len(history) % self.switch_every == 0:
            self.current_strategy = self.best_strategy()

    def describe_state(self) -> Dict:
        return {
            'current_strategy': self.current_strategy,
            'averages': {key: self.average_payoff(key) for key in self.sub_strategies},
        }

    def summary(self) -> str:
        return (f"Using {self.current_strategy} "
                f"(avg payoff {self.average_payoff(self.current_strategy):.2f})")


CLASSIC_STRATEGIES = [AlwaysCooperate, AlwaysDefect, TitForTat, Random, GrimTrigger, Pavlov,
                      GenerousTitForTat]
ADAPTIVE_STRATEGIES = [ProbabilisticReinforcement, QLearner, FrequencyAnalyzer, PatternDetector,
                       MetaStrategist]

STRATEGY_REGISTRY = {cls.strategy_id: cls for cls in CLASSIC_STRATEGIES + ADAPTIVE_STRATEGIES}

CLASSIC_STRATEGY_IDS = [cls.strategy_id for cls in CLASSIC_STRATEGIES]
ADAPTIVE_STRATEGY_IDS = [cls.strategy_id for cls in ADAPTIVE_STRATEGIES]


def create_strategy(strategy_id: str, rng: Optional[random.Random] = None, **kwargs) -> Strategy:
    """Instantiate a registered strategy by id"""
    try:
        cls = STRATEGY_REGISTRY[strategy_id]
    except KeyError:
        raise ValueError(
            f"Unknown strategy '{strategy_id}'. Known strategies: {', '.join(STRATEGY_REGISTRY)}"
        ) from None
    return cls(rng, **kwargs)
