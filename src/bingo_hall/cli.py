from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .card import LETTERS, Card, generate_card
from .config import resolve_parameters
from .errors import MalformedCardError
from .logging_setup import setup_logging
from .patterns import CATALOGUE, patterns_in
from .rng import create_rng
from .serialize import card_document, card_from_json, write_json
from .verify import find_winning_pattern
from .version import __version__

app = typer.Typer(help="Bingo rooms: cards, win checks and the game server")
console = Console()


@app.callback(invoke_without_command=True)
def common_options(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show application version and exit", is_eager=True
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _card_table(card: Card) -> Table:
    table = Table(show_lines=True)
    for letter in LETTERS:
        table.add_column(letter, justify="center")
    for row in card:
        table.add_row(*(str(cell) for cell in row))
    return table


def _parse_drawn(raw: str) -> List[int]:
    try:
        return [int(item) for item in raw.split(",") if item.strip()]
    except ValueError as exc:
        raise typer.BadParameter("--drawn must be comma separated integers") from exc


@app.command()
def card(
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a reproducible card"),
    engine: str = typer.Option("py_random", "--engine", help="py_random|numpy_pcg64"),
    as_json: bool = typer.Option(False, "--json", help="Print the card as JSON"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the card document to a JSON file"),
    force: bool = typer.Option(False, "--force", help="Overwrite --out if it exists"),
) -> None:
    """Generate one card."""
    try:
        rng = create_rng(engine, seed)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    generated = generate_card(rng)
    if out:
        write_json(Path(out), card_document(generated, engine=rng.engine, seed=seed), overwrite=force)
    if as_json:
        typer.echo(json.dumps(generated))
    else:
        console.print(_card_table(generated))


@app.command()
def check(
    card_path: Path = typer.Argument(..., help="JSON file holding a card, or a card document"),
    drawn: str = typer.Option(..., "--drawn", help="Comma separated drawn numbers"),
) -> None:
    """Check a card against drawn numbers; exit code 0 means bingo."""
    try:
        data = json.loads(card_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"Invalid card file: {exc}", err=True)
        raise typer.Exit(code=2)
    if isinstance(data, dict):
        data = data.get("card")
    try:
        parsed = card_from_json(data)
    except MalformedCardError as exc:
        typer.echo(f"Invalid card: {exc}", err=True)
        raise typer.Exit(code=2)
    pattern = find_winning_pattern(parsed, set(_parse_drawn(drawn)))
    if pattern is None:
        typer.echo("No bingo")
        raise typer.Exit(code=1)
    typer.echo(f"BINGO: {pattern.name} ({pattern.category})")
    console.print(pattern.render())


@app.command()
def patterns(
    category: Optional[str] = typer.Option(None, "--category", help="row|column|diagonal|box|corner|flower"),
) -> None:
    """Show the winning shapes in the order they are checked."""
    try:
        shown = patterns_in(category) if category else CATALOGUE
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    for pattern in shown:
        typer.echo(f"{pattern.name} [{pattern.category}]")
        typer.echo(pattern.render())
        typer.echo("")


@app.command()
def serve(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", help="Bind port"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
) -> None:
    """Run the room server."""
    cli_overrides = {}
    if host:
        cli_overrides["host"] = host
    if port:
        cli_overrides["port"] = port
    if log_file:
        cli_overrides["log_file"] = log_file
    if log_level:
        cli_overrides["log_level"] = log_level

    resolved, params_hash, _cfg_path = resolve_parameters(
        config_path_str=config, cli_overrides=cli_overrides
    )

    setup_logging(level=str(resolved.get("log_level", "INFO")), log_file=resolved.get("log_file"))

    if dry_run:
        typer.echo(f"Listening on: {resolved['host']}:{resolved['port']}")
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    from .web import create_app

    flask_app = create_app(resolved)
    socketio = flask_app.extensions["socketio"]
    socketio.run(
        flask_app,
        host=str(resolved["host"]),
        port=int(resolved["port"]),
        allow_unsafe_werkzeug=True,
    )


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
