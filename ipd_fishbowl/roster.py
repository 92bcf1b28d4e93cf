"""
Agent roster for the fishbowl
Owns durable per-agent state (cumulative score, move statistics, learned parameters)
"""

import random
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from .descriptions import get_strategy_info
from .payoffs import PD, Move, PayoffMatrix, RoundRecord
from .strategies import ADAPTIVE_STRATEGY_IDS, CLASSIC_STRATEGY_IDS, Strategy, create_strategy

AGENT_COUNT = 10


@dataclass
class Agent:
    """A fishbowl inhabitant: a strategy plus its cumulative record"""
    agent_id: str
    name: str
    strategy: Strategy
    score: float = 0.0
    matches_played: int = 0
    moves_played: int = 0
    cooperations: int = 0

    @property
    def is_adaptive(self) -> bool:
        return self.strategy.is_adaptive

    @property
    def cooperation_rate(self) -> float:
        return self.cooperations / self.moves_played if self.moves_played else 0.0

    def record_match(self, score: float, history: List[RoundRecord]):
        self.score += score
        self.matches_played += 1
        self.moves_played += len(history)
        self.cooperations += sum(1 for r in history if r.self_move == Move.COOPERATE)

    def reset_stats(self):
        self.score = 0.0
        self.matches_played = 0
        self.moves_played = 0
        self.cooperations = 0


@dataclass(frozen=True)
class AgentSnapshot:
    """Read-only view of an agent handed to presentation code"""
    agent_id: str
    name: str
    strategy_id: str
    is_adaptive: bool
    score: float
    matches_played: int
    cooperation_rate: float
    description: str
    state: Dict = field(default_factory=dict)


class Roster:
    """Ordered, fixed collection of agents"""

    def __init__(self, agents: Sequence[Agent], rng: Optional[random.Random] = None):
        ids = [agent.agent_id for agent in agents]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate agent ids in roster: {ids}")
        self.agents: List[Agent] = list(agents)
        self.rng = rng if rng is not None else random.Random()

    def __len__(self) -> int:
        return len(self.agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self.agents)

    def __getitem__(self, index: int) -> Agent:
        return self.agents[index]

    def get(self, agent_id: str) -> Agent:
        for agent in self.agents:
            if agent.agent_id == agent_id:
                return agent
        raise KeyError(agent_id)

    def snapshot(self) -> List[AgentSnapshot]:
        """Roster order, one snapshot per agent"""
        return [
            AgentSnapshot(
                agent_id=agent.agent_id,
                name=agent.name,
                strategy_id=agent.strategy.strategy_id,
                is_adaptive=agent.is_adaptive,
                score=agent.score,
                matches_played=agent.matches_played,
                cooperation_rate=agent.cooperation_rate,
                description=get_strategy_info(agent.strategy.strategy_id).description,
                state=agent.strategy.describe_state(),
            )
            for agent in self.agents
        ]

    def leaderboard(self, top_n: int = 6) -> List[Agent]:
        return sorted(self.agents, key=lambda a: a.score, reverse=True)[:top_n]

    def reset(self, reinitialize_learning: bool = False):
        """Zero scores and statistics; learned parameters survive unless asked otherwise"""
        for agent in self.agents:
            agent.reset_stats()
            agent.strategy.reset_match()
            if reinitialize_learning:
                agent.strategy.reset_learning()


def _adaptive_name(strategy: Strategy, ordinal: int) -> str:
    if strategy.strategy_id == "ADAPTIVE":
        return f"Adaptive-{ordinal}"
    return strategy.name if ordinal == 1 else f"{strategy.name} {ordinal}"


def build_roster(agent_count: int = AGENT_COUNT, rng: Optional[random.Random] = None,
                 classic_ids: Sequence[str] = tuple(CLASSIC_STRATEGY_IDS),
                 adaptive_ids: Sequence[str] = tuple(ADAPTIVE_STRATEGY_IDS),
                 payoff_matrix: PayoffMatrix = PD) -> Roster:
    """Classic strategies first (deduplicated), then adaptive agents cycling through adaptive_ids"""
    rng = rng if rng is not None else random.Random()
    agents: List[Agent] = []
    seen = set()
    for strategy_id in classic_ids:
        if strategy_id in seen:
            continue
        seen.add(strategy_id)
        if len(agents) >= agent_count:
            break
        strategy = create_strategy(strategy_id, rng)
        strategy.set_payoff_matrix(payoff_matrix)
        agents.append(Agent(agent_id=strategy_id, name=strategy.name, strategy=strategy))

    ordinals: Dict[str, int] = {}
    position = 0
    while len(agents) < agent_count and adaptive_ids:
        strategy_id = adaptive_ids[position % len(adaptive_ids)]
        position += 1
        ordinals[strategy_id] = ordinals.get(strategy_id, 0) + 1
        strategy = create_strategy(strategy_id, rng)
        strategy.set_payoff_matrix(payoff_matrix)
        agents.append(Agent(
            agent_id=f"{strategy_id}_{ordinals[strategy_id]}",
            name=_adaptive_name(strategy, ordinals[strategy_id]),
            strategy=strategy,
        ))

    return Roster(agents, rng=rng)


def build_tooltip_content(agent: Agent) -> Dict:
    """Everything the presentation layer shows when an agent is hovered"""
    info = get_strategy_info(agent.strategy.strategy_id)
    content = {
        'title': agent.name + (" - Learning AI" if agent.is_adaptive else " - Classic Strategy"),
        'desc': info.description,
        'reasoning': info.reasoning,
        'strengths': list(info.strengths),
        'weaknesses': list(info.weaknesses),
        'real_world': info.real_world,
        'performance': info.performance,
        'details': agent.strategy.summary(),
        'score': f"Current Score: {round(agent.score)}",
    }
    if agent.is_adaptive:
        content['learning_mechanism'] = info.learning_mechanism or ""
    return content
