"""CLI entry point for screentest."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from screentest.errors import CheckFailure, CompileError, DiscoveryError
from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase
from screentest.models.test_result import CaseResult
from screentest.orchestrator import Coordinator
from screentest.reporter import generate_json_report

console = Console()

DEFAULT_CONFIG = "screentest.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(path: str) -> RunnerConfig:
    """Load ``path``, falling back to defaults when the default file is absent."""
    try:
        return RunnerConfig.load(path)
    except FileNotFoundError:
        if path != DEFAULT_CONFIG:
            console.print(f"[red]Config file not found: {path}[/red]")
            sys.exit(1)
        return RunnerConfig()


def _capture_label(tc: TestCase) -> str:
    if tc.element_selector is not None:
        return f"element {tc.element_selector}"
    return tc.capture.kind


class ConsoleReporter:
    """Prints a line per finished test case and keeps results for a summary."""

    def __init__(self) -> None:
        self.results: list[tuple[Path, CaseResult]] = []

    def case_started(self, script: Path, test_case: TestCase) -> None:
        pass

    def case_finished(self, script: Path, result: CaseResult) -> None:
        self.results.append((script, result))
        if result.result == "pass":
            console.print(f"[green]PASS[/green] {escape(script.name)}::{escape(result.test_name)}")
        else:
            console.print(f"[red]{result.result.upper()}[/red] {escape(script.name)}::{escape(result.test_name)}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual diff testing for webpages served from two origins."""
    setup_logging(verbose)


@cli.command()
@click.argument("pattern")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--json-report", type=click.Path(), default=None, help="Write a JSON report here")
def check(pattern: str, config: str, json_report: str | None) -> None:
    """Run every script matched by PATTERN and report all failures together."""
    coordinator = Coordinator(load_config(config))
    try:
        run_result = coordinator.check(pattern)
    except (CompileError, DiscoveryError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    except CheckFailure as e:
        if json_report:
            generate_json_report(e.run_result, Path(json_report))
        console.print(f"[red]{escape(e.report)}[/red]")
        sys.exit(1)

    if json_report:
        generate_json_report(run_result, Path(json_report))
    console.print(f"[green]All {run_result.total_tests} tests passed[/green]")


@cli.command()
@click.argument("pattern")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def test(pattern: str, config: str) -> None:
    """Run every test case matched by PATTERN, reporting each one separately."""
    coordinator = Coordinator(load_config(config))
    reporter = ConsoleReporter()
    try:
        run_result = coordinator.run_each(pattern, reporter)
    except (CompileError, DiscoveryError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title="Results")
    table.add_column("Script", style="bold")
    table.add_column("Test")
    table.add_column("Result")
    table.add_column("Reason")
    for script, r in reporter.results:
        style = "green" if r.result == "pass" else "red"
        table.add_row(
            escape(script.name), escape(r.test_name),
            f"[{style}]{r.result}[/{style}]", escape(r.failure_reason or ""),
        )
    console.print(table)

    for script in run_result.script_results:
        if script.failures:
            console.print(f"  {escape(script.script)}: inspect diffs at [blue]{escape(script.output_dir)}[/blue]")
    if not run_result.ok:
        sys.exit(1)


@cli.command("list")
@click.argument("pattern")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def list_tests(pattern: str, config: str) -> None:
    """Compile the scripts matched by PATTERN and list their test cases."""
    cfg = load_config(config)
    coordinator = Coordinator(cfg)
    try:
        scripts = coordinator.compile_all(pattern, require_tests=False)
    except (CompileError, DiscoveryError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    for path, tests in scripts:
        table = Table(title=escape(str(path)))
        table.add_column("Test", style="bold")
        table.add_column("Compare")
        table.add_column("Capture")
        table.add_column("Viewport")
        for tc in tests:
            width, height = tc.resolved_viewport(cfg.browser_width, cfg.browser_height)
            viewport = f"{width}x{height}"
            if tc.uses_default_viewport:
                viewport += " (default)"
            table.add_row(
                escape(tc.name), escape(f"{tc.url_a}\n{tc.url_b}"),
                escape(_capture_label(tc)), viewport,
            )
        console.print(table)


@cli.command()
def init() -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return
    RunnerConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")


if __name__ == "__main__":
    cli()
