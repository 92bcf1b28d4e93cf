#!/usr/bin/env python3
"""
Command line driver for the IPD fishbowl
Builds a roster, steps the scheduler at the requested cadence and writes reports
"""

import argparse
import os
import random
import time
from datetime import datetime
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")

from ipd_fishbowl import (
    Scheduler, SimulationConfig, Timer, build_roster, build_tooltip_content,
    cooperation_summary, create_experiment_config, format_leaderboard, interactions_frame,
    load_env_vars, plot_score_history, roster_frame, save_experiment_metadata
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Iterated Prisoner's Dilemma fishbowl")
    parser.add_argument("--ticks", type=int, default=200,
                        help="Number of matches to play per run (default: 200)")
    parser.add_argument("--runs", type=int, default=1,
                        help="Number of runs; the roster is reset between runs (default: 1)")
    parser.add_argument("--agents", type=int, default=None,
                        help="Population size (default: FISHBOWL_AGENT_COUNT or 10)")
    parser.add_argument("--rounds", type=int, default=None,
                        help="Rounds per match (default: FISHBOWL_ROUNDS or 20)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the shared random source (default: FISHBOWL_SEED or unseeded)")
    parser.add_argument("--paced", action="store_true",
                        help="Sleep FISHBOWL_TICK_INTERVAL_MS between ticks like the live view")
    parser.add_argument("--interval-ms", type=int, default=None,
                        help="Override the pause between paced ticks in milliseconds")
    parser.add_argument("--reinitialize", action="store_true",
                        help="Re-randomize learned parameters when resetting between runs")
    parser.add_argument("--output", type=str, default="results",
                        help="Output directory for results")
    parser.add_argument("--no-plot", action="store_true",
                        help="Skip the score chart")
    parser.add_argument("--env-file", type=str, default=None,
                        help="Path of a .env file with FISHBOWL_* settings")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print every match result")
    return parser


def resolve_config(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig.from_env(load_env_vars(args.env_file))
    if args.agents is not None:
        config.agent_count = args.agents
    if args.rounds is not None:
        config.rounds = args.rounds
    if args.seed is not None:
        config.seed = args.seed
    if args.interval_ms is not None:
        config.tick_interval_ms = args.interval_ms
    if args.reinitialize:
        config.reinitialize_on_reset = True
    return config


def run_paced(scheduler: Scheduler, ticks: int, interval_ms: int, verbose: bool):
    """Step once per interval, the way the live view drives the engine"""
    for _ in range(ticks):
        started = time.perf_counter()
        if scheduler.step() is None:
            break
        if verbose:
            print(f"  tick {scheduler.tick}: {scheduler.log[0]}")
        remaining = interval_ms / 1000 - (time.perf_counter() - started)
        if remaining > 0:
            time.sleep(remaining)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except ValueError as e:
        parser.error(str(e))
    if args.ticks < 0 or args.runs < 1:
        parser.error("--ticks must be >= 0 and --runs must be >= 1")

    print("=" * 60)
    print("IPD FISHBOWL")
    print(f"{config.agent_count} agents, {config.rounds} rounds per match, {args.ticks} ticks x {args.runs} run(s)")
    print("=" * 60)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = os.path.join(args.output, f"fishbowl_{timestamp}")
    os.makedirs(run_dir, exist_ok=True)
    print(f"📁 Results will be saved to: {run_dir}")

    rng = random.Random(config.seed)
    roster = build_roster(config.agent_count, rng=rng)
    scheduler = Scheduler(roster, rounds=config.rounds, rng=rng, log_size=config.log_size,
                          chart_size=config.chart_size, chart_top_n=config.leaderboard_size,
                          verbose=args.verbose and not args.paced)

    if len(roster) < 2:
        print("Fewer than two agents in the roster - nothing to simulate.")

    save_experiment_metadata(os.path.join(run_dir, "config.json"),
                             create_experiment_config(config, args.ticks))

    for run_index in range(1, args.runs + 1):
        if run_index > 1:
            scheduler.reset(reinitialize_learning=config.reinitialize_on_reset)
        print(f"\nRun {run_index}/{args.runs}")

        with Timer(f"Run {run_index}"):
            if args.paced:
                run_paced(scheduler, args.ticks, config.tick_interval_ms, args.verbose)
            else:
                scheduler.run(args.ticks, progress=True)

        prefix = os.path.join(run_dir, f"run{run_index}")
        roster_frame(roster).to_csv(f"{prefix}_roster.csv", index=False)
        interactions_frame(scheduler.events).to_csv(f"{prefix}_interactions.csv", index=False)
        cooperation_summary(roster).to_csv(f"{prefix}_cooperation.csv", index=False)
        save_experiment_metadata(f"{prefix}_tooltips.json",
                                 {agent.agent_id: build_tooltip_content(agent) for agent in roster})
        if not args.no_plot and scheduler.chart_history:
            plot_score_history(scheduler.chart_history, f"{prefix}_scores.png")

        print("\nLeaderboard:")
        print(format_leaderboard(roster, config.leaderboard_size))
        print("\nRecent matches:")
        for entry in list(scheduler.log)[:8]:
            print(f"  {entry}")

    print(f"\n{'='*60}")
    print(f"Done. Ticks played in last run: {scheduler.tick}")
    print(f"{'='*60}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
