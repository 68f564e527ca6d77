import json
import sys
from pathlib import Path
from typing import Optional

import typer

from launcharr.config import configure_logging, get_config, to_dict
from launcharr.core.tasks import BackgroundRunner
from launcharr.dispatcher import build_dispatcher

app = typer.Typer(add_completion=False, help="Query and refresh Sonarr from the terminal.")

REFRESH_CHOICES = ("today", "yesterday", "overdue", "days")


def _setup(config: Optional[str]):
    settings = get_config(config, reload=True)
    configure_logging(settings.log_level, settings.log_file)
    return settings


def _print_results(results) -> None:
    for i, result in enumerate(results):
        marker = "*" if result.action else " "
        typer.echo(f"{i:>2}{marker} {result.title}")
        if result.subtitle:
            typer.echo(f"     {result.subtitle}")


@app.command()
def query(
    text: str = typer.Argument("", help="Raw launcher query, e.g. '-c today' or a series name."),
    activate: Optional[int] = typer.Option(None, "--activate", "-x", help="Run the action of result N."),
    no_credential: bool = typer.Option(False, "--no-credential", help="Dispatch as if no API key were set."),
    config: Optional[str] = typer.Option(None, "--config", help="Settings file path."),
):
    """Dispatch one query and print the results (tasks run inline)."""
    settings = _setup(config)
    dispatcher = build_dispatcher(settings, runner=BackgroundRunner(synchronous=True))
    results = dispatcher.dispatch(text, has_credential=False if no_credential else None)
    _print_results(results)

    if activate is None:
        return
    if not 0 <= activate < len(results):
        typer.echo(f"No result #{activate}", err=True)
        raise typer.Exit(code=2)
    chosen = results[activate]
    if chosen.action is None:
        typer.echo(f"Result #{activate} has no action", err=True)
        raise typer.Exit(code=2)
    ok = chosen.activate()
    typer.echo(f"Activated: {chosen.title} ({'ok' if ok else 'no close'})")


@app.command()
def refresh(
    which: str = typer.Argument(..., help="today | yesterday | overdue | days"),
    days: Optional[int] = typer.Argument(None, help="Number of prior days for 'days'."),
    config: Optional[str] = typer.Option(None, "--config", help="Settings file path."),
):
    """Run a calendar refresh synchronously and print the summary."""
    settings = _setup(config)
    which = which.lower()
    if which not in REFRESH_CHOICES:
        typer.echo(f"Unknown refresh '{which}'. Choose one of: {', '.join(REFRESH_CHOICES)}", err=True)
        raise typer.Exit(code=2)
    if not settings.has_credential():
        typer.echo("Sonarr API key not configured. Run: query '-setup apikey YOUR_KEY'", err=True)
        raise typer.Exit(code=1)

    coordinator = build_dispatcher(settings, runner=BackgroundRunner(synchronous=True)).ctx.coordinator
    if which == "today":
        result = coordinator.refresh_today()
    elif which == "yesterday":
        result = coordinator.refresh_yesterday()
    elif which == "overdue":
        result = coordinator.refresh_overdue()
    else:
        result = coordinator.refresh_prior_days(days if days is not None else 1)

    typer.echo(json.dumps(result.to_dict(), indent=2))
    raise typer.Exit(code=0 if result.success else 1)


@app.command()
def probe(config: Optional[str] = typer.Option(None, "--config", help="Settings file path.")):
    """Test the Sonarr connection once."""
    settings = _setup(config)
    dispatcher = build_dispatcher(settings, runner=BackgroundRunner(synchronous=True))
    status = dispatcher.ctx.probe.probe(dispatcher.ctx.client)
    typer.echo(json.dumps(status.to_dict()))
    raise typer.Exit(code=0 if status.state.value == "ok" else 1)


@app.command()
def show_config(config: Optional[str] = typer.Option(None, "--config", help="Settings file path.")):
    """Print the effective settings (API key masked)."""
    settings = _setup(config)
    typer.echo(json.dumps(to_dict(settings), indent=2))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8787, help="Bind port."),
    config: Optional[str] = typer.Option(None, "--config", help="Settings file path."),
):
    """Run the HTTP query host."""
    _setup(config)
    # services/ lives beside app/ at the repo root
    repo_root = str(Path(__file__).resolve().parent.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)
    from services.host.app import app as flask_app
    flask_app.run(host=host, port=port)


if __name__ == "__main__":
    app()
