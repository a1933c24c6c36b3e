#!/usr/bin/env python3
"""Run a preflop EV matchup between two strategy presets."""

import argparse
import logging
import signal
import sys
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rangeev.sim import (
    Action,
    EVSimulator,
    SimulationConfig,
    SimulationResult,
    get_preset,
    run_parallel,
)
from rangeev.sim.strategy import PRESETS


def main():
    parser = argparse.ArgumentParser(
        description="Estimate fold/call/raise EV per starting hand by Monte Carlo"
    )
    parser.add_argument(
        "--hero",
        choices=sorted(PRESETS),
        default="baseline",
        help="Hero strategy preset (default: baseline)",
    )
    parser.add_argument(
        "--villain",
        choices=sorted(PRESETS),
        default="baseline",
        help="Opponent strategy preset (default: baseline)",
    )
    parser.add_argument(
        "-n", "--sims",
        type=int,
        default=200,
        help="Simulations per matchup (default: 200)",
    )
    parser.add_argument(
        "-p", "--pot",
        type=float,
        default=1.0,
        help="Pot before hero acts (default: 1.0)",
    )
    parser.add_argument(
        "--raise-size",
        type=float,
        default=1.0,
        help="Hero investment when raising (default: 1.0)",
    )
    parser.add_argument(
        "--call-size",
        type=float,
        default=1.0,
        help="Hero cost when calling (default: 1.0)",
    )
    parser.add_argument(
        "--sample",
        choices=["all", "bounded-50"],
        default="all",
        help="Hero classes to simulate (default: all)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible runs",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Worker processes; above 1 runs in parallel without progress (default: 1)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of best and worst hands to show (default: 10)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    console = Console()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        config = SimulationConfig(
            sims_per_matchup=args.sims,
            pot_size=args.pot,
            raise_size=args.raise_size,
            call_size=args.call_size,
            sample_mode=args.sample,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return 1

    hero = get_preset(args.hero)
    villain = get_preset(args.villain)

    console.print(f"[bold]Hero:[/] {args.hero}   [bold]Villain:[/] {args.villain}")
    console.print(
        f"[bold]Pot:[/] {config.pot_size}   [bold]Raise:[/] {config.raise_size}   "
        f"[bold]Call:[/] {config.call_size}   [bold]Sims/matchup:[/] {config.sims_per_matchup}"
    )
    console.print()

    if args.workers > 1:
        with console.status(f"Simulating on {args.workers} workers..."):
            result = run_parallel(hero, villain, config, workers=args.workers, seed=args.seed)
    else:
        result = _run_with_progress(console, hero, villain, config, args.seed)

    if not result.per_class:
        console.print("[yellow]Cancelled before any hand finished.[/]")
        return 1

    if result.is_partial:
        console.print(
            f"[yellow]Cancelled: partial result over {len(result.per_class)} "
            f"of {result.classes_planned} hands[/]"
        )

    _display_summary(console, result)
    _display_hands(console, result, args.top)

    return 0


def _run_with_progress(console: Console, hero, villain, config, seed) -> SimulationResult:
    """Serial run with a progress bar; Ctrl-C stops after the current hand."""
    simulator = EVSimulator(config, np.random.default_rng(seed))
    cancelled = False

    def on_interrupt(signum, frame):
        nonlocal cancelled
        cancelled = True

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Simulating...", total=None)

            def callback(done, planned, class_result):
                progress.update(
                    task,
                    total=planned,
                    completed=done,
                    description=f"{class_result.hand}: best {class_result.best_action()}",
                )

            result = simulator.run(
                hero, villain, callback=callback, should_stop=lambda: cancelled
            )
    finally:
        signal.signal(signal.SIGINT, previous)

    return result


def _display_summary(console: Console, result: SimulationResult) -> None:
    """Display global EV per action."""
    table = Table(title="Matchup Results", show_header=True, header_style="bold")
    table.add_column("Action", style="cyan")
    table.add_column("Avg EV", justify="right")

    for action, summary in result.actions.items():
        color = "green" if summary.avg_ev >= 0 else "red"
        table.add_row(str(action), f"[{color}]{summary.avg_ev:+.3f}[/]")

    console.print(table)
    console.print(
        Panel(
            f"Best action: [bold]{result.best_action()}[/]\n"
            f"Hero strategy EV: {result.strategy_ev:+.3f}\n"
            f"{result.total_trials} matchups over {len(result.per_class)} hands",
            border_style="green",
        )
    )


def _display_hands(console: Console, result: SimulationResult, top: int) -> None:
    """Display the best and worst hands by their best-action EV."""
    ranked = sorted(
        result.per_class.values(),
        key=lambda cr: cr.ev[cr.best_action()],
        reverse=True,
    )

    table = Table(title="Per-Hand EV", show_header=True, header_style="bold")
    table.add_column("Hand", style="bold")
    table.add_column("Fold", justify="right")
    table.add_column("Call", justify="right")
    table.add_column("Raise", justify="right")
    table.add_column("Best", justify="center")

    shown = ranked if len(ranked) <= 2 * top else ranked[:top] + ranked[-top:]
    for i, cr in enumerate(shown):
        if len(ranked) > 2 * top and i == top:
            table.add_row("...", "", "", "", "")
        table.add_row(
            cr.hand,
            f"{cr.ev[Action.FOLD]:+.3f}",
            f"{cr.ev[Action.CALL]:+.3f}",
            f"{cr.ev[Action.RAISE]:+.3f}",
            str(cr.best_action()),
        )

    console.print(table)


if __name__ == "__main__":
    sys.exit(main())
