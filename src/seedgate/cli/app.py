"""
Root Typer application for the seedgate CLI.

Diagnostic only: shows how the current process would be classified, so a
deployment can be checked for misclassification before it matters.
"""

from __future__ import annotations

import json

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from seedgate.core.errors import ConfigError
from seedgate.core.logging import configure_logging
from seedgate.core.settings import get_settings
from seedgate.detect.classifier import ContextClassifier

app = typer.Typer(
    name="seedgate",
    help="seedgate — guarded access to read-only data.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("seedgate")
        except PackageNotFoundError:
            from seedgate import __version__ as v
        typer.echo(f"seedgate {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """seedgate CLI — inspect execution-context classification."""
    try:
        settings = get_settings()
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    except (ValidationError, ConfigError) as exc:
        err_console.print(f"[bold red]Error[/bold red] (config): {exc}")
        raise typer.Exit(code=1) from exc


@app.command("detect")
def detect(
    json_out: bool = typer.Option(False, "--json", help="Emit JSON."),
    explain: bool = typer.Option(False, "--explain", help="Show every signal, not only the deciding one."),
) -> None:
    """Classify this process as production or an allowed context."""
    classifier = ContextClassifier(settings=get_settings())
    result = classifier.result
    reports = classifier.explain() if explain else []

    if json_out:
        payload = {
            "verdict": result.verdict,
            "is_production": result.is_production,
            "is_allowed_context": result.is_allowed_context,
            "reason": result.reason,
            "signal": result.signal,
        }
        if explain:
            payload["signals"] = [
                {"name": r.name, "kind": r.kind.value, "fired": r.fired} for r in reports
            ]
        typer.echo(json.dumps(payload, indent=2))
        return

    style = "bold red" if result.is_production else "bold green"
    console.print(f"[{style}]{result.verdict}[/{style}]  {result.reason}")

    if explain:
        table = Table(title="Signals (allowed-context signals are evaluated first)")
        table.add_column("Signal", style="cyan")
        table.add_column("Kind")
        table.add_column("Fired")
        for report in reports:
            table.add_row(report.name, report.kind.value, "yes" if report.fired else "")
        console.print(table)
        console.print(
            "[dim]Signals are heuristics, not a security boundary.[/dim]"
        )


if __name__ == "__main__":
    app()
