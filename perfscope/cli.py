"""Click-based CLI for running sample comparisons."""

import functools
import json
import sys
from collections.abc import Callable
from typing import Any, NoReturn

import click
from pydantic import ValidationError

from . import __version__
from .config import PerfScopeConfig
from .errors import ConfigurationError, PerfScopeError
from .perf_logging import setup_logging
from .session import PerfSession


def _build_strategies(size: int) -> dict[str, dict[str, Callable[[], Any]]]:
    """Sample strategies grouped by operation label."""
    values = list(range(size))

    def loop_append() -> list[int]:
        out = []
        for v in values:
            out.append(v * v)
        return out

    def loop_sum() -> int:
        total = 0
        for v in values:
            total += v
        return total

    return {
        "build_list": {
            "loop-append": loop_append,
            "comprehension": lambda: [v * v for v in values],
            "map": lambda: list(map(lambda v: v * v, values)),
        },
        "sum_values": {
            "builtin-sum": lambda: sum(values),
            "loop-sum": loop_sum,
            "reduce": lambda: functools.reduce(lambda a, b: a + b, values, 0),
        },
    }


def common_options(f: Any) -> Any:
    """Logging options shared by all commands."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option(
        "--log-format",
        type=click.Choice(["text", "json"]),
        default=None,
        help="Log output format",
    )(f)
    return f


def _fail(error: PerfScopeError) -> NoReturn:
    click.echo(error.format(), err=True)
    sys.exit(1)


def _configure(verbose: bool, quiet: bool, log_format: str | None) -> PerfScopeConfig:
    if quiet and verbose:
        raise click.UsageError("--quiet and --verbose are mutually exclusive")
    try:
        config = PerfScopeConfig.from_env(log_format=log_format)
    except ValidationError as e:
        _fail(
            ConfigurationError(
                "Invalid perfscope configuration",
                details={
                    ".".join(str(part) for part in err["loc"]): err["msg"]
                    for err in e.errors()
                },
            )
        )
    setup_logging(
        level=config.log_level,
        quiet=quiet,
        verbose=verbose,
        log_format=config.log_format,
    )
    return config


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """perfscope - compare implementation strategies by timing them."""


@cli.command()
@common_options
@click.option("--iterations", "-n", type=int, default=None, help="Benchmark iterations per strategy")
@click.option("--size", type=click.IntRange(min=1), default=1000, help="Input size for sample strategies")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def compare(
    verbose: bool,
    quiet: bool,
    log_format: str | None,
    iterations: int | None,
    size: int,
    as_json: bool,
) -> None:
    """Benchmark and rank the built-in sample strategies."""
    config = _configure(verbose, quiet, log_format)
    session = PerfSession(config=config)

    try:
        for label, strategies in _build_strategies(size).items():
            for subject, operation in strategies.items():
                session.run_benchmark(subject, label, operation, iterations)
                with session.measure(subject):
                    operation()
    except PerfScopeError as e:
        _fail(e)

    comparison = session.compare()

    if as_json:
        payload = {
            "benchmarks": [r.to_dict() for r in session.get_benchmark_results()],
            "aggregates": [r.to_dict() for r in session.get_all_aggregates()],
            "comparison": comparison.to_dict(),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(session.generate_report())
    click.echo("## Live ranking")
    click.echo("")
    for position, entry in enumerate(comparison.ranking, start=1):
        click.echo(f"{position}. {entry.subject}: {entry.score:.2f}")
    if comparison.fastest:
        click.echo("")
        click.echo(f"Fastest: {comparison.fastest}")


@cli.command()
@common_options
@click.option("--samples", type=click.IntRange(min=1), default=1, help="Number of snapshots to take")
def memory(verbose: bool, quiet: bool, log_format: str | None, samples: int) -> None:
    """Print memory usage snapshots with their trend."""
    config = _configure(verbose, quiet, log_format)
    session = PerfSession(config=config)

    for _ in range(samples):
        snapshot = session.get_memory_snapshot()
        if not snapshot.is_available:
            click.echo("Memory usage unavailable on this host")
            continue
        click.echo(
            f"used={snapshot.used_mb:.2f}MB total={snapshot.total_mb:.2f}MB "
            f"({snapshot.percentage:.0f}%) trend={snapshot.trend.value}"
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
