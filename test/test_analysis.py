import importlib
import random

import matplotlib
import pandas as pd

from ipd_fishbowl import analysis
from ipd_fishbowl.analysis import (
    cooperation_summary, format_leaderboard, interactions_frame, plot_score_history, roster_frame,
    score_history_frame
)
from ipd_fishbowl.roster import Agent, Roster, build_roster
from ipd_fishbowl.strategies import AlwaysCooperate, AlwaysDefect, TitForTat
from ipd_fishbowl.tournament import Scheduler


def played_trio():
    roster = Roster([
        Agent(agent_id="C_ALWAYS", name="Always Cooperate", strategy=AlwaysCooperate()),
        Agent(agent_id="D_ALWAYS", name="Always Defect", strategy=AlwaysDefect()),
        Agent(agent_id="TFT", name="Tit for Tat", strategy=TitForTat()),
    ], rng=random.Random(0))
    scheduler = Scheduler(roster)
    scheduler.step(pair=(0, 1))  # 0 - 100
    scheduler.step(pair=(2, 1))  # 19 - 24
    return scheduler


class TestFrames:
    """Test suite for the pandas report tables"""

    def test_roster_frame_sorted_by_score(self):
        """Test that the roster table lists the best score first"""
        scheduler = played_trio()
        df = roster_frame(scheduler.roster)
        assert list(df['agent_id']) == ["D_ALWAYS", "TFT", "C_ALWAYS"]
        assert list(df['score']) == [124, 19, 0]
        assert list(df['matches_played']) == [2, 1, 1]
        assert not df['adaptive'].any()

    def test_interactions_frame(self):
        """Test one row per interaction event in tick order"""
        scheduler = played_trio()
        df = interactions_frame(scheduler.events)
        assert list(df['tick']) == [0, 1]
        assert list(df['agent_a']) == ["Always Cooperate", "Tit for Tat"]
        assert list(df['last_move_b']) == ['D', 'D']
        assert list(df['match_score_b']) == [100, 24]

    def test_empty_interactions_frame_keeps_columns(self):
        """Test that an empty event list still yields the expected columns"""
        df = interactions_frame([])
        assert df.empty
        assert 'payoff_a' in df.columns

    def test_score_history_frame(self):
        """Test the wide tick-indexed score table"""
        history = [
            {'tick': 2, 'scores': {'A': 6, 'B': 1}},
            {'tick': 1, 'scores': {'A': 3}},
        ]
        df = score_history_frame(history)
        assert list(df.index) == [1, 2]
        assert df.index.name == 'tick'
        assert df.loc[2, 'B'] == 1
        assert pd.isna(df.loc[1, 'B'])

    def test_empty_score_history(self):
        """Test that no chart points give an empty table"""
        assert score_history_frame([]).empty

    def test_cooperation_summary(self):
        """Test cooperation rates and average score per move"""
        scheduler = played_trio()
        df = cooperation_summary(scheduler.roster).set_index('name')
        assert df.loc["Always Cooperate", 'cooperation_rate'] == 1.0
        assert df.loc["Always Defect", 'cooperation_rate'] == 0.0
        assert df.loc["Tit for Tat", 'cooperation_rate'] == 0.05
        assert df.loc["Always Defect", 'avg_score_per_move'] == 124 / 40
        assert df.loc["Always Defect", 'total_moves'] == 40

    def test_cooperation_summary_before_any_match(self):
        """Test that agents without moves report zeros"""
        df = cooperation_summary(build_roster(4, rng=random.Random(0)))
        assert (df['total_moves'] == 0).all()
        assert (df['avg_score_per_move'] == 0.0).all()


class TestReports:
    """Test suite for the text leaderboard and the score chart"""

    def test_leaderboard_text(self):
        """Test the ranked leaderboard lines"""
        text = format_leaderboard(played_trio().roster, top_n=2)
        lines = text.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith(" 1. Always Defect")
        assert lines[0].rstrip().endswith("124  (classic)")
        assert "Tit for Tat" in lines[1]

    def test_plot_score_history(self, tmp_path):
        """Test that the chart is written and names the current leaders"""
        scheduler = Scheduler(build_roster(12, rng=random.Random(5)))
        scheduler.run(25)
        path = tmp_path / "scores.png"
        names = plot_score_history(scheduler.chart_history, str(path))
        assert path.exists() and path.stat().st_size > 0
        assert names
        assert set(scheduler.chart_history[-1]['scores']) <= set(names)

    def test_plot_empty_history(self, tmp_path):
        """Test that an empty history still writes an empty chart"""
        path = tmp_path / "empty.png"
        assert plot_score_history([], str(path)) == []
        assert path.exists()

    def test_import_leaves_backend_alone(self, monkeypatch):
        """Test that importing the reporting module does not pick a matplotlib backend"""
        calls = []
        monkeypatch.setattr(matplotlib, "use", lambda *args, **kwargs: calls.append(args))
        importlib.reload(analysis)
        assert calls == []
