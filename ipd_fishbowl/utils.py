"""
Utility functions for fishbowl runs
Environment configuration, timing helpers and experiment metadata
"""

import json
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv

from .payoffs import PD, RoundRecord

ENV_PREFIX = "FISHBOWL_"


def load_env_vars(env_file: Optional[str] = None) -> Dict[str, str]:
    """Load .env (if present) and return every FISHBOWL_* variable"""
    load_dotenv(env_file)
    return {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}


def _env_int(env: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SimulationConfig:
    """Knobs for one fishbowl run"""
    agent_count: int = 10
    rounds: int = 20
    tick_interval_ms: int = 300
    seed: Optional[int] = None
    log_size: int = 12
    chart_size: int = 40
    leaderboard_size: int = 6
    reinitialize_on_reset: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SimulationConfig":
        if env is None:
            env = load_env_vars()
        defaults = cls()
        return cls(
            agent_count=_env_int(env, "FISHBOWL_AGENT_COUNT", defaults.agent_count),
            rounds=_env_int(env, "FISHBOWL_ROUNDS", defaults.rounds),
            tick_interval_ms=_env_int(env, "FISHBOWL_TICK_INTERVAL_MS", defaults.tick_interval_ms),
            seed=_env_int(env, "FISHBOWL_SEED", defaults.seed),
            reinitialize_on_reset=_env_bool(env, "FISHBOWL_REINITIALIZE_ON_RESET",
                                            defaults.reinitialize_on_reset),
        )


def format_history(history: List[RoundRecord]) -> str:
    """Compact 'CD CC DD' style rendering of a match from one side's view"""
    return " ".join(f"{r.self_move.value}{r.opponent_move.value}" for r in history)


def create_experiment_config(config: SimulationConfig, ticks: int) -> Dict:
    return {
        'timestamp': datetime.now().isoformat(),
        'ticks': ticks,
        'payoff_matrix': PD.as_dict(),
        **asdict(config),
    }


def save_experiment_metadata(filepath: str, metadata: Dict):
    with open(filepath, 'w') as f:
        json.dump(metadata, f, indent=2, default=str)


class Timer:
    """Context manager measuring wall-clock time"""

    def __init__(self, name: str = "Operation", verbose: bool = True):
        self.name = name
        self.verbose = verbose
        self.elapsed = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc):
        self.elapsed = time.perf_counter() - self._start
        if self.verbose:
            print(f"{self.name} took {self.elapsed:.2f}s")
        return False
