"""
Command-line interface for prize-alloc.

Provides commands for running a scenario, inspecting the generated
curves, and sweeping budgets.
"""

from pathlib import Path
from typing import List, Optional
import sys

import typer
from loguru import logger

from prize_alloc.config import load_config
from prize_alloc.exceptions import PrizeAllocError

app = typer.Typer(
    name="prize-alloc",
    help="Prize-draw marketing budget allocator",
    add_completion=False,
)


def _setup_logging(level: str, verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else level.upper())


def _load_config_or_exit(config_path: Optional[Path]):
    try:
        return load_config(config_path)
    except PrizeAllocError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def run(
    budget: Optional[float] = typer.Option(
        None, "--budget", "-b", help="Total budget (defaults to config)"
    ),
    name: str = typer.Option("", "--name", "-n", help="Scenario name"),
    scenario_path: Optional[Path] = typer.Option(
        None, "--scenario", "-s", help="Scenario request YAML (plan, channels, budget)"
    ),
    channels: Optional[List[str]] = typer.Option(
        None, "--channel", help="Channel to enable (repeatable; default all)"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Curve generation seed"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the scenario to this JSON file"
    ),
    baseline: bool = typer.Option(
        False, "--baseline", help="Compare against the previous-spend baseline"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Run one scenario and print the tier summary and spend matrix.
    """
    from prize_alloc.contracts import ScenarioRequest
    from prize_alloc.optimization import (
        baseline_allocation,
        build_curve_index,
        compare_to_baseline,
        run_scenario,
        spend_matrix,
        tier_summary,
    )
    from prize_alloc.plan import default_plan

    config = _load_config_or_exit(config_path)
    _setup_logging(config.logging.level, verbose)

    if seed is not None:
        # Override on a copy; the shared config keeps its seed
        config = config.model_copy(deep=True)
        config.curves.seed = seed

    if scenario_path is not None:
        try:
            request = ScenarioRequest.from_yaml(scenario_path)
        except PrizeAllocError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=2)
        plan = request.to_plan(config.curves)
        selected = request.channels or list(config.curves.channels)
        name = name or request.name
        budget = request.budget if budget is None else budget
    else:
        plan = default_plan(config.curves.tiers, config.curves.n_periods)
        selected = list(channels) if channels else list(config.curves.channels)

    if budget is None:
        budget = config.allocation.default_budget

    curves = build_curve_index(config)

    try:
        scenario = run_scenario(name, budget, plan, selected, config=config, curves=curves)
    except PrizeAllocError as e:
        logger.error(f"Scenario rejected [{e.code}]: {e}")
        raise typer.Exit(code=1)

    result = scenario.result
    typer.echo(
        f"{scenario.name} | Budget {budget:,.0f} | Spent {result.total_spend:,.0f} | "
        f"Uplift {result.total_uplift:,.1f} | Eligible curves: {result.eligible_curves}"
    )

    tiers = config.curves.tiers
    if baseline:
        base = baseline_allocation(
            curves,
            total_spend=config.baseline.total_spend,
            seed=config.baseline.seed,
            min_weight=config.baseline.min_weight,
        )
        summary = compare_to_baseline(result.allocations, base, curves, tiers)
    else:
        summary = tier_summary(result.allocations, curves, tiers)
    typer.echo(summary.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))

    matrix = spend_matrix(result.allocations, curves, config.curves.channels, tiers)
    typer.echo(matrix.to_string(float_format=lambda v: f"{v:,.0f}"))

    if output is not None:
        scenario.save(output)
        logger.info(f"Saved scenario to {output}")


@app.command()
def curves(
    seed: Optional[int] = typer.Option(None, "--seed", help="Curve generation seed"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the parameter table to CSV"
    ),
):
    """Show the generated curve parameters per (tier, channel)."""
    from prize_alloc.curves import curve_params_frame, generate_curve_params

    config = _load_config_or_exit(config_path)
    params = generate_curve_params(seed=seed, settings=config.curves)
    df = curve_params_frame(params)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output, index=False)
        logger.info(f"Saved {len(df)} curve parameter rows to {output}")
    else:
        typer.echo(df.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))


@app.command()
def frontier(
    min_budget: float = typer.Option(0, "--min", help="Lowest budget"),
    max_budget: float = typer.Option(1_000_000, "--max", help="Highest budget"),
    points: int = typer.Option(11, "--points", "-p", help="Number of budget levels"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the frontier to CSV"
    ),
):
    """Sweep budgets for the default plan and report uplift at each level."""
    from prize_alloc.optimization import build_curve_index, compute_efficiency_frontier, compute_eligible
    from prize_alloc.plan import default_plan

    config = _load_config_or_exit(config_path)
    curve_index = build_curve_index(config)
    plan = default_plan(config.curves.tiers, config.curves.n_periods)
    eligible = compute_eligible(curve_index, plan, config.curves.channels)

    df = compute_efficiency_frontier(
        [curve_index[k] for k in eligible],
        (min_budget, max_budget),
        n_points=points,
        step=config.allocation.step,
    )

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output, index=False)
        logger.info(f"Saved frontier ({len(df)} budgets) to {output}")
    else:
        typer.echo(df.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))


if __name__ == "__main__":
    app()
