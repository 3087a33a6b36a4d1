from __future__ import annotations
import logging
from pathlib import Path

import typer
from rich.console import Console

from .checks import ConfigChecks
from .errors import ConfigurationError
from .loader import load
from .config import ServiceSettingsJsonFile
from .models import Section
from .reporter import Reporter

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _exit_code(reporter: Reporter, sections: list[Section], fail_on_warn: bool) -> int:
    code = reporter.summary_exit_code(sections)
    if fail_on_warn and code == 0:
        _, warn, _ = reporter.count_levels(sections)
        if warn > 0:
            return 2
    return code


def _finalize(console: Console, reporter: Reporter, sections: list[Section], fail_on_warn: bool):
    code = _exit_code(reporter, sections, fail_on_warn)
    reporter.summary(sections)
    ok, warn, err = reporter.count_levels(sections)
    suffix = " (fail-on-warn)" if fail_on_warn else ""
    console.print(f"[bold]Summary:[/bold] OK {ok} • WARN {warn} • ERROR {err} → exit {code}{suffix}")
    raise typer.Exit(code=code)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log registration details."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


@app.command("check")
def check(
    config: Path = typer.Argument(..., help="Service agent settings JSON file"),
    section: str = typer.Option("ServiceAgents", "--section", help="Section holding the service entries."),
    module: str | None = typer.Option(None, "--module", help="Module whose agent classes should match the services."),
    fail_on_warn: bool = typer.Option(False, "--fail-on-warn", help="Return exit code 2 if warnings are present (and no errors)."),
):
    """Validate every service entry and, with --module, the agent lookup."""
    console = Console()
    reporter = Reporter(console)
    sections = ConfigChecks(config, section=section, module=module).run()
    for sec in sections:
        reporter.section(sec)
    _finalize(console, reporter, sections, fail_on_warn)


@app.command("list")
def list_services(
    config: Path = typer.Argument(..., help="Service agent settings JSON file"),
    section: str = typer.Option("ServiceAgents", "--section"),
):
    """Show the configured services and their resolved base URLs."""
    console = Console()
    reporter = Reporter(console)
    try:
        settings = load(ServiceSettingsJsonFile(file_name=str(config), section=section))
    except ConfigurationError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    reporter.services(settings)


if __name__ == "__main__":
    app()
