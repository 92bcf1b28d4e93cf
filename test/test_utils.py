import json
import os

import pytest

from ipd_fishbowl.payoffs import Move
from ipd_fishbowl.utils import (
    SimulationConfig, Timer, create_experiment_config, format_history, load_env_vars,
    save_experiment_metadata
)
from run_fishbowl import main


@pytest.fixture
def clean_env(monkeypatch):
    """Private copy of the environment without any FISHBOWL_* settings"""
    env = {k: v for k, v in os.environ.items() if not k.startswith("FISHBOWL_")}
    monkeypatch.setattr(os, "environ", env)
    return env


class TestSimulationConfig:
    """Test suite for environment-driven configuration"""

    def test_defaults(self):
        """Test the defaults when no variables are set"""
        config = SimulationConfig.from_env({})
        assert config == SimulationConfig()
        assert (config.agent_count, config.rounds, config.tick_interval_ms) == (10, 20, 300)
        assert config.seed is None
        assert (config.log_size, config.chart_size, config.leaderboard_size) == (12, 40, 6)
        assert config.reinitialize_on_reset is False

    def test_values_from_env(self):
        """Test that every FISHBOWL_* variable is read"""
        config = SimulationConfig.from_env({
            "FISHBOWL_AGENT_COUNT": "8",
            "FISHBOWL_ROUNDS": "50",
            "FISHBOWL_TICK_INTERVAL_MS": "100",
            "FISHBOWL_SEED": "42",
            "FISHBOWL_REINITIALIZE_ON_RESET": "yes",
        })
        assert (config.agent_count, config.rounds, config.tick_interval_ms) == (8, 50, 100)
        assert config.seed == 42
        assert config.reinitialize_on_reset is True

    def test_blank_values_fall_back(self):
        """Test that blank variables keep the defaults"""
        config = SimulationConfig.from_env({"FISHBOWL_SEED": "  ", "FISHBOWL_ROUNDS": ""})
        assert config.seed is None
        assert config.rounds == 20

    def test_bad_integer_names_the_variable(self):
        """Test that a non-integer value raises an error naming the variable"""
        with pytest.raises(ValueError, match="FISHBOWL_ROUNDS"):
            SimulationConfig.from_env({"FISHBOWL_ROUNDS": "twenty"})

    def test_load_env_vars_reads_dotenv_file(self, clean_env, tmp_path):
        """Test that a .env file is loaded and filtered to FISHBOWL_* keys"""
        env_file = tmp_path / ".env"
        env_file.write_text("FISHBOWL_AGENT_COUNT=5\nOTHER_SETTING=1\n")
        loaded = load_env_vars(str(env_file))
        assert loaded == {"FISHBOWL_AGENT_COUNT": "5"}
        assert SimulationConfig.from_env(loaded).agent_count == 5

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        """Test that variables already set are not overridden by the .env file"""
        clean_env["FISHBOWL_ROUNDS"] = "7"
        env_file = tmp_path / ".env"
        env_file.write_text("FISHBOWL_ROUNDS=9\n")
        assert load_env_vars(str(env_file))["FISHBOWL_ROUNDS"] == "7"


class TestHelpers:
    """Test suite for formatting, metadata and timing helpers"""

    def test_format_history(self, history):
        """Test the compact history rendering"""
        assert format_history(history(['CD', 'CC', 'DD'])) == "CD CC DD"
        assert format_history([]) == ""

    def test_experiment_config_round_trips_through_json(self, tmp_path):
        """Test that run metadata is written as JSON"""
        metadata = create_experiment_config(SimulationConfig(seed=4), ticks=30)
        assert metadata['ticks'] == 30
        assert metadata['seed'] == 4
        assert metadata['payoff_matrix'] == {'R': 3, 'T': 5, 'P': 1, 'S': 0}
        path = tmp_path / "config.json"
        save_experiment_metadata(str(path), metadata)
        assert json.loads(path.read_text())['agent_count'] == 10

    def test_metadata_falls_back_to_str(self, tmp_path):
        """Test that values JSON cannot encode are written as strings"""
        path = tmp_path / "meta.json"
        save_experiment_metadata(str(path), {'move': Move.DEFECT})
        assert json.loads(path.read_text()) == {'move': 'D'}

    def test_timer(self, capsys):
        """Test that a verbose timer reports the elapsed time"""
        with Timer("Quick", verbose=True) as timer:
            pass
        assert timer.elapsed >= 0
        assert "Quick took" in capsys.readouterr().out

    def test_quiet_timer(self, capsys):
        """Test that a quiet timer prints nothing"""
        with Timer("Quiet", verbose=False):
            pass
        assert capsys.readouterr().out == ""


class TestCommandLine:
    """Test suite for the run_fishbowl command line driver"""

    def _args(self, tmp_path, *extra):
        return ["--output", str(tmp_path), "--env-file", str(tmp_path / "missing.env"),
                "--seed", "3", "--agents", "4", "--ticks", "5", "--no-plot", *extra]

    def _run_dir(self, tmp_path):
        (run_dir,) = [p for p in tmp_path.iterdir() if p.name.startswith("fishbowl_")]
        return run_dir

    def test_single_run_writes_reports(self, clean_env, tmp_path, capsys):
        """Test that one run writes the config and every report file"""
        assert main(self._args(tmp_path)) == 0
        run_dir = self._run_dir(tmp_path)
        for name in ("config.json", "run1_roster.csv", "run1_interactions.csv",
                     "run1_cooperation.csv", "run1_tooltips.json"):
            assert (run_dir / name).exists()
        assert not (run_dir / "run1_scores.png").exists()

        config = json.loads((run_dir / "config.json").read_text())
        assert (config['agent_count'], config['seed'], config['ticks']) == (4, 3, 5)
        tooltips = json.loads((run_dir / "run1_tooltips.json").read_text())
        assert set(tooltips) == {"C_ALWAYS", "D_ALWAYS", "TFT", "RANDOM"}
        assert "Leaderboard:" in capsys.readouterr().out

    def test_multiple_runs(self, clean_env, tmp_path):
        """Test that each run gets its own reports"""
        assert main(self._args(tmp_path, "--runs", "2", "--reinitialize")) == 0
        run_dir = self._run_dir(tmp_path)
        assert (run_dir / "run2_roster.csv").exists()
        assert json.loads((run_dir / "config.json").read_text())['reinitialize_on_reset'] is True

    def test_plot_is_written(self, clean_env, tmp_path):
        """Test that the score chart is written unless disabled"""
        args = [a for a in self._args(tmp_path) if a != "--no-plot"]
        assert main(args) == 0
        assert (self._run_dir(tmp_path) / "run1_scores.png").exists()

    def test_bad_environment_is_a_usage_error(self, clean_env, tmp_path):
        """Test that an invalid FISHBOWL_* value exits with a usage error"""
        clean_env["FISHBOWL_ROUNDS"] = "many"
        with pytest.raises(SystemExit) as excinfo:
            main(self._args(tmp_path))
        assert excinfo.value.code == 2

    def test_negative_ticks_rejected(self, clean_env, tmp_path):
        """Test that a negative tick count is rejected"""
        with pytest.raises(SystemExit):
            main(self._args(tmp_path, "--ticks", "-1"))
