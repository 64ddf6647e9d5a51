#!/usr/bin/env python3
"""Manage tracked players, sync logs from logs.tf and report class stats."""

from __future__ import annotations

import dataclasses
import logging
import signal
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.config import load_sync_config
from domain.filters import validate_min_ratio
from domain.performance import ClassPerformance, MedicPerformance
from domain.pipeline import SyncOrchestrator
from domain.player_class import PlayerClass, UnknownClassError
from domain.steam_id import MalformedSteamIdError, SteamID
from logs_tf import LogsTfClient
from repositories import SqlLogStore, ensure_schema

DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "sync" / "default.toml"

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        help="Database URL. Defaults to the local mixes-stats postgres instance.",
    ),
]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Mixes log tracking jobs.",
)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_steam_id(text: str) -> SteamID:
    try:
        return SteamID.parse(text)
    except MalformedSteamIdError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _store(db_url: str) -> SqlLogStore:
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    return SqlLogStore(create_session_factory(engine))


@app.command("init-db")
def init_db(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Create the users, logs and stats tables."""
    ensure_schema(create_db_engine(db_url))
    typer.echo("schema ready")


@app.command("add-user")
def add_user(
    steam_id: Annotated[str, typer.Argument(help="steamID64, steamID3 or STEAM_X:Y:Z.")],
    discord_id: Annotated[int, typer.Argument(help="Discord user id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Start tracking a player."""
    parsed = _parse_steam_id(steam_id)
    if not _store(db_url).add_user(parsed, discord_id):
        typer.echo(f"already registered steam_id={parsed} or discord_id={discord_id}")
        raise typer.Exit(code=1)
    typer.echo(f"added steam_id={parsed} discord_id={discord_id}")


@app.command("remove-user")
def remove_user(
    steam_id: Annotated[str, typer.Argument(help="steamID64, steamID3 or STEAM_X:Y:Z.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Stop tracking a player. Stored stats are kept."""
    parsed = _parse_steam_id(steam_id)
    if not _store(db_url).remove_user(parsed):
        typer.echo(f"not registered steam_id={parsed}")
        raise typer.Exit(code=1)
    typer.echo(f"removed steam_id={parsed}")


@app.command("list-users")
def list_users(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    users = _store(db_url).list_users()
    for steam_id, discord_id in users:
        typer.echo(f"{steam_id} {steam_id.to_id3_string()} discord_id={discord_id}")
    typer.echo(f"tracked_players={len(users)}")


@app.command("sync")
def sync(
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_file: Annotated[
        Path,
        typer.Option("--config-file", help="Sync TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
    min_ratio: Annotated[
        float | None,
        typer.Option("--min-ratio", help="Override [sync].min_ratio from the config."),
    ] = None,
) -> None:
    """Fetch, filter and store every new log of the tracked players.

    Ctrl-C stops the run after the log currently being stored.
    """
    try:
        config = load_sync_config(config_file)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    settings = config.sync
    if min_ratio is not None:
        try:
            validate_min_ratio(min_ratio)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        settings = dataclasses.replace(settings, min_ratio=min_ratio)

    cancelled = False

    def _request_cancel(signum: int, frame: object) -> None:
        nonlocal cancelled
        cancelled = True
        typer.echo("cancel requested, stopping after the current log")

    previous_handler = signal.signal(signal.SIGINT, _request_cancel)
    try:
        with LogsTfClient.from_settings(config.upstream) as client:
            orchestrator = SyncOrchestrator(
                store=_store(db_url),
                archive=client,
                settings=settings,
                echo=typer.echo,
                should_cancel=lambda: cancelled,
            )
            summary = orchestrator.sync()
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if summary.cancelled:
        raise typer.Exit(code=130)


@app.command("class-report")
def class_report(
    steam_id: Annotated[str, typer.Argument(help="steamID64, steamID3 or STEAM_X:Y:Z.")],
    player_class: Annotated[str, typer.Argument(metavar="CLASS", help="Class name, e.g. scout.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    limit: Annotated[int, typer.Option("--limit", help="Number of most recent logs.")] = 20,
) -> None:
    """Print a player's most recent performances on one class."""
    if limit <= 0:
        raise typer.BadParameter("--limit must be greater than 0")
    parsed = _parse_steam_id(steam_id)
    try:
        wanted = PlayerClass.from_log_name(player_class)
    except UnknownClassError as exc:
        raise typer.BadParameter(str(exc)) from exc

    performances = _store(db_url).get_class_performance(parsed, wanted, limit)
    for logged in performances:
        generic = logged.performance.generic
        specific = logged.performance.specific
        prefix = (
            f"log_id={logged.log_id} {logged.played_at:%Y-%m-%d} {logged.map_name} "
            f"rounds={generic.won_rounds}/{generic.num_rounds} dt={generic.damage_taken}"
        )
        if isinstance(specific, ClassPerformance):
            typer.echo(
                f"{prefix} kills={specific.kills} assists={specific.assists} "
                f"deaths={specific.deaths} dmg={specific.damage} "
                f"time={specific.time_played_secs}s"
            )
        elif isinstance(specific, MedicPerformance):
            typer.echo(
                f"{prefix} heal={specific.healing} ubers={specific.num_ubers} "
                f"drops={specific.num_drops} "
                f"avg_uber={specific.average_uber_length_secs:.1f}s"
            )
    typer.echo(f"performances={len(performances)}")


@app.command("convert-id")
def convert_id(
    text: Annotated[str, typer.Argument(help="steamID64, steamID3 or STEAM_X:Y:Z.")],
) -> None:
    """Print every textual form of a steam id."""
    parsed = _parse_steam_id(text)
    typer.echo(f"id64={parsed.to_id64_string()}")
    typer.echo(f"id3={parsed.to_id3_string()}")
    typer.echo(f"id={parsed.to_id1_string()}")


if __name__ == "__main__":
    app()
