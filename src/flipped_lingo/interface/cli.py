"""flipped-lingo CLI — study, review and inspect decks from the terminal."""

import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError

from flipped_lingo.application.config import resolve_config
from flipped_lingo.application.srs import (
    StudyService,
    calculate_stats,
    get_cards_for_review,
    get_optimal_study_session,
    initialize_card,
)
from flipped_lingo.domain.errors import BackupFormatError
from flipped_lingo.domain.srs.models import ReviewQuality
from flipped_lingo.infrastructure.serialization import CardModel, export_srs_data, import_srs_data
from flipped_lingo.interface._common import (
    _echo_json,
    _read_text,
    _repo,
    _resolve_with_overrides,
    handle_errors,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="lingo: spaced-repetition flashcards for language learners.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage flipped-lingo configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}

DeckArg = Annotated[str, typer.Argument(help="Deck id (file name without .json).")]
DataDirOpt = Annotated[
    Path | None, typer.Option("--data-dir", help="Directory holding deck files.")
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for lingo."""
    logging.getLogger("flipped_lingo").setLevel(_LOG_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Deck commands
# ---------------------------------------------------------------------------


@app.command()
@handle_errors
def decks(data_dir: DataDirOpt = None):
    """List the decks in the data directory."""
    config = _resolve_with_overrides(data_dir=data_dir)
    for deck_id in _repo(config).list_decks():
        typer.echo(deck_id)


@app.command()
@handle_errors
def create(
    deck: DeckArg,
    cards_file: Annotated[Path, typer.Argument(help="JSON array of cards to seed the deck.")],
    name: Annotated[str | None, typer.Option(help="Display name (defaults to the id).")] = None,
    data_dir: DataDirOpt = None,
):
    """[bold green]Create[/bold green] a deck from a JSON list of cards."""
    config = _resolve_with_overrides(data_dir=data_dir)
    payload = _read_text(cards_file, "cards file")
    try:
        models = TypeAdapter(list[CardModel]).validate_json(payload)
    except ValidationError as e:
        raise BackupFormatError(f"Invalid cards file {cards_file}: {e}") from e

    cards = [initialize_card(m.to_domain()) for m in models]
    asyncio.run(_repo(config).create_deck(deck, name or deck, cards))
    typer.echo(f"Created deck {deck} with {len(cards)} cards")


@app.command()
@handle_errors
def stats(deck: DeckArg, data_dir: DataDirOpt = None):
    """Show deck statistics as JSON."""
    config = _resolve_with_overrides(data_dir=data_dir)
    cards = asyncio.run(_repo(config).load_cards(deck))
    _echo_json(calculate_stats(cards))


@app.command()
@handle_errors
def due(deck: DeckArg, data_dir: DataDirOpt = None):
    """Show the new and due-for-review cards of a deck."""
    config = _resolve_with_overrides(data_dir=data_dir)
    cards = asyncio.run(_repo(config).load_cards(deck))
    result = get_cards_for_review(cards, config.scheduler_settings())
    _echo_json(
        {
            "new": [c.id for c in result.new_cards],
            "review": [c.id for c in result.review_cards],
        }
    )


@app.command()
@handle_errors
def session(
    deck: DeckArg,
    target_minutes: Annotated[
        int | None, typer.Option(help="Time budget. Currently does not size the session.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed the shuffle for a repeatable order.")] = None,
    data_dir: DataDirOpt = None,
):
    """Print the card ids of a study session, in study order."""
    config = _resolve_with_overrides(data_dir=data_dir)
    cards = asyncio.run(_repo(config).load_cards(deck))
    session_cards = get_optimal_study_session(
        cards,
        target_minutes=target_minutes or config.default_target_minutes,
        settings=config.scheduler_settings(),
        rng=random.Random(seed) if seed is not None else None,
        session_size=config.session_size,
    )
    if not session_cards:
        typer.echo("Nothing to study right now.")
        return
    for card in session_cards:
        typer.echo(card.id)


@app.command()
@handle_errors
def review(
    deck: DeckArg,
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    quality: Annotated[int, typer.Argument(help="Recall quality 0 (blackout) to 5 (perfect).")],
    time_spent: Annotated[int, typer.Option(help="Seconds spent on the card.")] = 0,
    data_dir: DataDirOpt = None,
):
    """[bold]Review[/bold] one card and save its new schedule."""
    config = _resolve_with_overrides(data_dir=data_dir)
    service = StudyService(_repo(config), settings=config.scheduler_settings())
    result = asyncio.run(service.review_card(deck, card_id, quality, time_spent))

    logger.info(f"{card_id}: {ReviewQuality(result.quality).label}, next in {result.new_interval}d")
    _echo_json(result)


@app.command("export")
@handle_errors
def export_cmd(
    deck: DeckArg,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write to file.")] = None,
    data_dir: DataDirOpt = None,
):
    """Export a deck's SRS data as a JSON backup."""
    config = _resolve_with_overrides(data_dir=data_dir)
    cards = asyncio.run(_repo(config).load_cards(deck))
    payload = export_srs_data(cards)
    if output:
        output.write_text(payload, encoding="utf-8")
        typer.echo(f"Exported {len(cards)} cards to {output}")
    else:
        typer.echo(payload)


@app.command("import")
@handle_errors
def import_cmd(
    deck: DeckArg,
    backup_file: Annotated[Path, typer.Argument(help="Backup produced by 'lingo export'.")],
    data_dir: DataDirOpt = None,
):
    """Restore a deck's SRS data from a JSON backup."""
    config = _resolve_with_overrides(data_dir=data_dir)
    repo = _repo(config)

    async def _restore() -> int:
        cards = await repo.load_cards(deck)
        restored = import_srs_data(cards, _read_text(backup_file, "SRS backup"))
        await repo.save_cards(deck, restored)
        return len(restored)

    count = asyncio.run(_restore())
    typer.echo(f"Restored SRS data for deck {deck} ({count} cards)")


# ---------------------------------------------------------------------------
# Config / server
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Print the resolved configuration as JSON."""
    config = resolve_config()
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


@app.command()
def server(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8777,
    reload: Annotated[bool, typer.Option(help="Reload on code changes.")] = False,
):
    """Run the HTTP scheduling API."""
    import uvicorn

    uvicorn.run("flipped_lingo.server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
