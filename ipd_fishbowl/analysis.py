"""
Reporting helpers for fishbowl runs
Turns roster snapshots, interaction events and chart history into tables and plots
"""

from typing import Dict, Iterable, List

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .roster import Roster
from .tournament import InteractionEvent


def roster_frame(roster: Roster) -> pd.DataFrame:
    """One row per agent, best score first"""
    rows = []
    for snap in roster.snapshot():
        rows.append({
            'agent_id': snap.agent_id,
            'name': snap.name,
            'strategy': snap.strategy_id,
            'adaptive': snap.is_adaptive,
            'score': snap.score,
            'matches_played': snap.matches_played,
            'cooperation_rate': snap.cooperation_rate,
        })
    df = pd.DataFrame(rows, columns=['agent_id', 'name', 'strategy', 'adaptive', 'score',
                                     'matches_played', 'cooperation_rate'])
    return df.sort_values('score', ascending=False, kind='stable').reset_index(drop=True)


def interactions_frame(events: Iterable[InteractionEvent]) -> pd.DataFrame:
    return pd.DataFrame([event.to_dict() for event in events],
                        columns=['tick', 'agent_a', 'agent_b', 'last_move_a', 'last_move_b',
                                 'payoff_a', 'payoff_b', 'match_score_a', 'match_score_b'])


def score_history_frame(chart_history: Iterable[Dict]) -> pd.DataFrame:
    """Wide table indexed by tick with one column per agent that made the top list"""
    records = {point['tick']: point['scores'] for point in chart_history}
    if not records:
        return pd.DataFrame()
    df = pd.DataFrame.from_dict(records, orient='index').sort_index()
    df.index.name = 'tick'
    return df


def cooperation_summary(roster: Roster) -> pd.DataFrame:
    """Cooperation rate and average score per move for every agent"""
    agents = list(roster)
    scores = np.array([a.score for a in agents], dtype=float)
    moves = np.array([a.moves_played for a in agents], dtype=float)
    coops = np.array([a.cooperations for a in agents], dtype=float)
    with np.errstate(divide='ignore', invalid='ignore'):
        avg_per_move = np.where(moves > 0, scores / moves, 0.0)
        coop_rate = np.where(moves > 0, coops / moves, 0.0)
    df = pd.DataFrame({
        'name': [a.name for a in agents],
        'adaptive': [a.is_adaptive for a in agents],
        'total_moves': moves.astype(int),
        'cooperation_rate': coop_rate,
        'avg_score_per_move': avg_per_move,
    })
    return df.sort_values('avg_score_per_move', ascending=False, kind='stable').reset_index(drop=True)


def format_leaderboard(roster: Roster, top_n: int = 6) -> str:
    lines = []
    for rank, agent in enumerate(roster.leaderboard(top_n), 1):
        kind = "learning" if agent.is_adaptive else "classic"
        lines.append(f"{rank:>2}. {agent.name:<32} {round(agent.score):>7}  ({kind})")
    return "\n".join(lines)


def plot_score_history(chart_history: Iterable[Dict], filepath: str,
                       title: str = "Fishbowl leaders over time") -> List[str]:
    """Line chart of leader scores per tick; returns the plotted agent names"""
    df = score_history_frame(chart_history)
    fig, ax = plt.subplots(figsize=(10, 6))
    for name in df.columns:
        ax.plot(df.index, df[name], label=name, linewidth=2)
    ax.set_xlabel('Tick')
    ax.set_ylabel('Cumulative score')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    if len(df.columns):
        ax.legend(loc='upper left', fontsize=9)
    fig.tight_layout()
    fig.savefig(filepath, dpi=120)
    plt.close(fig)
    return list(df.columns)
