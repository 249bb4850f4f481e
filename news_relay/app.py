"""Typer CLI entrypoint for news-relay."""

from __future__ import annotations

import signal
from dataclasses import dataclass
from threading import Event
from typing import Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .bot import CommandRouter, UpdatePoller
from .config import ConfigRepository, RelayConfig
from .engine import BotApiClient, DedupStore, Enricher, NewsSource, Translator
from .engine.delivery import SinkFactory
from .errors import DedupStoreError
from .infra import SQLiteManager
from .logging_conf import configure_logging, default_log_dir, tail_log
from .orchestrator import Orchestrator, PassSummary
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="news-relay: translate and relay new articles to bot destinations",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Configuration commands", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Log viewing commands", no_args_is_help=True)
app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")

console = Console()

_SECRET_FIELDS = {"token", "api_key"}


@dataclass
class AppState:
    repository: ConfigRepository
    config: RelayConfig
    storage: SQLiteManager
    scheduler: APSchedulerAdapter
    orchestrator: Orchestrator
    primary_client: BotApiClient


def build_state(verbose: bool) -> AppState:
    """Wire the pipeline from configuration. Raises DedupStoreError if the store cannot open."""

    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    config = repository.load()
    storage = SQLiteManager()
    store = DedupStore(storage, repository.store_path(config))

    primary_client = BotApiClient(config.primary_bot)
    broadcast_client = BotApiClient(config.broadcast_bot)
    sink_factory = SinkFactory(
        primary_client,
        broadcast_client,
        channel_id=config.broadcast_bot.channel_id,
        parse_mode=config.delivery.parse_mode,
        photo_fallback_to_text=config.delivery.photo_fallback_to_text,
        disable_web_page_preview=config.delivery.disable_web_page_preview,
    )
    scheduler = APSchedulerAdapter()
    orchestrator = Orchestrator(
        config=config,
        store=store,
        source=NewsSource(config.source),
        enricher=Enricher(Translator(config.translator)),
        sink_factory=sink_factory,
        scheduler=scheduler,
    )
    return AppState(
        repository=repository,
        config=config,
        storage=storage,
        scheduler=scheduler,
        orchestrator=orchestrator,
        primary_client=primary_client,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = _build_or_exit(verbose=False)
        ctx.obj = state
    return state


def _build_or_exit(verbose: bool) -> AppState:
    try:
        return build_state(verbose)
    except DedupStoreError as exc:
        console.print(f"Dedup store could not be opened: {exc.message}", style="red")
        raise typer.Exit(code=1) from exc


def _render_summary(summary: PassSummary) -> Table:
    table = Table(title=f"Pass result · {summary.target or 'broadcast'}", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key in ("fetched", "skipped", "delivered", "undelivered", "committed", "destination_failures", "trimmed"):
        table.add_row(key.replace("_", " "), str(getattr(summary, key)))
    if summary.dropped:
        table.add_row("dropped", "yes")
    if summary.aborted:
        table.add_row("aborted", summary.error or "yes")
    return table


def _render_jobs(jobs: list[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job", style="cyan")
    table.add_column("Trigger")
    table.add_column("Next run", style="green")
    for job in jobs:
        table.add_row(job["id"], job["trigger"], str(job["next_run_time"] or "-"))
    return table


def _redact(payload):
    if isinstance(payload, dict):
        return {
            key: ("***" if key in _SECRET_FIELDS and value else _redact(value))
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [_redact(value) for value in payload]
    return payload


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    if ctx.invoked_subcommand in ("config", "log"):
        configure_logging(verbose=verbose)
        return
    ctx.obj = _build_or_exit(verbose)


@app.command("run", help="Start the scheduler and listen for bot commands until interrupted.")
def run(
    ctx: typer.Context,
    listen: bool = typer.Option(True, "--listen/--no-listen", help="Poll the bot for /start and /test."),
) -> None:
    state = _get_state(ctx)
    stop = Event()

    def _stop(*_args) -> None:
        stop.set()

    signal.signal(signal.SIGTERM, _stop)
    targets: list[str | None] = list(state.config.recipients)
    if not targets and state.config.broadcast_bot.channel_id:
        targets.append(None)
    for target in targets:
        state.orchestrator.schedule_target(target, run_now=True)
    state.scheduler.start()
    console.print(_render_jobs(state.scheduler.list_jobs()))
    console.print(
        f"Relaying every {state.config.schedule.interval_seconds:g}s to "
        f"{len(targets)} scheduled target(s). Press Ctrl-C to stop.",
        style="green",
    )
    try:
        if listen and state.config.primary_bot.token:
            router = CommandRouter(state.orchestrator, state.primary_client)
            UpdatePoller(state.primary_client, router).run_forever(stop)
        else:
            while not stop.is_set():
                stop.wait(1.0)
    except KeyboardInterrupt:
        stop.set()
    finally:
        state.scheduler.shutdown()
        state.storage.close_all()
        console.print("Stopped.", style="yellow")


@app.command("once", help="Run a single pass immediately.")
def once(
    ctx: typer.Context,
    chat: Optional[str] = typer.Option(None, "--chat", help="Direct recipient chat id."),
) -> None:
    state = _get_state(ctx)
    summary = state.orchestrator.run_pass(chat)
    console.print(_render_summary(summary))
    if summary.aborted:
        raise typer.Exit(code=1)


@app.command("test-broadcast", help="Send a one-off test message to the destinations.")
def test_broadcast(
    ctx: typer.Context,
    chat: Optional[str] = typer.Option(None, "--chat", help="Direct recipient chat id."),
) -> None:
    state = _get_state(ctx)
    report = state.orchestrator.broadcast_test(chat)
    if not report.attempted:
        console.print("No destinations configured.", style="yellow")
        raise typer.Exit(code=1)
    for label in report.delivered:
        console.print(f"{label}: ok", style="green")
    for label, error in report.failed.items():
        console.print(f"{label}: {error}", style="red")


@app.command("history", help="Show the most recently delivered titles.")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", help="Number of records to show."),
) -> None:
    state = _get_state(ctx)
    rows = state.orchestrator.view_history(limit=limit)
    if not rows:
        console.print("No history yet.", style="dim")
        return
    table = Table(title=f"Last {len(rows)} delivered", box=box.SIMPLE_HEAD)
    table.add_column("Inserted at", style="green")
    table.add_column("Title", overflow="fold")
    table.add_column("Link", overflow="fold", style="dim")
    for record in rows:
        table.add_row(record.inserted_at, record.title, record.link or "")
    console.print(table)


@app.command("trim", help="Apply the retention bound to the dedup store now.")
def trim(
    ctx: typer.Context,
    max_count: Optional[int] = typer.Option(None, "--max-count", min=0, help="Override retention bound."),
) -> None:
    state = _get_state(ctx)
    removed = state.orchestrator.trim_now(max_count)
    console.print(f"Removed {removed} record(s).", style="green")


@app.command("reset", help="Forget every delivered title.")
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    if not yes and not typer.confirm("Clear the whole delivery history?", default=False):
        console.print("Cancelled.", style="yellow")
        raise typer.Exit(code=0)
    state.orchestrator.reset_history()
    console.print("Delivery history cleared; the next pass relays every listed article.", style="green")


@config_app.command("show", help="Print the effective configuration (secrets redacted).")
def config_show() -> None:
    repository = ConfigRepository()
    payload = _redact(repository.load().model_dump(mode="json"))
    console.print(yaml.safe_dump(payload, allow_unicode=True, sort_keys=False))


@config_app.command("init", help="Write a default configuration file.")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    repository = ConfigRepository()
    path = repository.locator.config_path()
    if path.exists() and not force:
        console.print(f"{path} already exists (use --force to overwrite).", style="yellow")
        raise typer.Exit(code=1)
    repository.save(RelayConfig())
    console.print(f"Wrote {path}", style="green")


@log_app.command("show", help="Show the tail of the relay log.")
def log_show(
    tail: int = typer.Option(100, "--tail", help="Number of lines."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead.", is_flag=True),
) -> None:
    path = default_log_dir() / ("error.log" if errors else "relay.log")
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print("".join(lines))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
