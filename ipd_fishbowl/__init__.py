"""
IPD Fishbowl: match simulation and scoring engine for an interactive
Iterated Prisoner's Dilemma visualization
"""

from .payoffs import Move, PayoffMatrix, RoundRecord, PD, calculate_payoff

from .strategies import (
    Strategy,

    # Classical strategies
    AlwaysCooperate, AlwaysDefect, TitForTat, GenerousTitForTat, GrimTrigger, Random, Pavlov,

    # Adaptive strategies
    ProbabilisticReinforcement, QLearner, FrequencyAnalyzer, PatternDetector, MetaStrategist,

    # Registry
    STRATEGY_REGISTRY, CLASSIC_STRATEGY_IDS, ADAPTIVE_STRATEGY_IDS, create_strategy
)

from .descriptions import StrategyInfo, STRATEGY_INFO, get_strategy_info
from .roster import Agent, AgentSnapshot, Roster, build_roster, build_tooltip_content
from .tournament import (
    ITERATED_LENGTH, MatchResult, InteractionEvent, StepResult, Scheduler, play_match
)
from .analysis import (
    roster_frame,
    interactions_frame,
    score_history_frame,
    cooperation_summary,
    format_leaderboard,
    plot_score_history
)
from .utils import (
    SimulationConfig, load_env_vars, format_history,
    create_experiment_config, save_experiment_metadata, Timer
)

__version__ = "1.0.0"
__all__ = [
    # Payoffs
    "Move", "PayoffMatrix", "RoundRecord", "PD", "calculate_payoff",

    # Strategies
    "Strategy",
    "AlwaysCooperate", "AlwaysDefect", "TitForTat", "GenerousTitForTat", "GrimTrigger",
    "Random", "Pavlov",
    "ProbabilisticReinforcement", "QLearner", "FrequencyAnalyzer", "PatternDetector",
    "MetaStrategist",
    "STRATEGY_REGISTRY", "CLASSIC_STRATEGY_IDS", "ADAPTIVE_STRATEGY_IDS", "create_strategy",
    "StrategyInfo", "STRATEGY_INFO", "get_strategy_info",

    # Roster and scheduling
    "Agent", "AgentSnapshot", "Roster", "build_roster", "build_tooltip_content",
    "ITERATED_LENGTH", "MatchResult", "InteractionEvent", "StepResult", "Scheduler", "play_match",

    # Analysis
    "roster_frame", "interactions_frame", "score_history_frame", "cooperation_summary",
    "format_leaderboard", "plot_score_history",

    # Utils
    "SimulationConfig", "load_env_vars", "format_history",
    "create_experiment_config", "save_experiment_metadata", "Timer"
]
