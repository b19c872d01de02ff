"""Helpers shared by CLI commands."""

import functools
import json
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

import typer

from flipped_lingo.application.config import AppConfig, resolve_config
from flipped_lingo.domain.errors import BackupFormatError, LingoError
from flipped_lingo.infrastructure.adapters.json_store import JsonDeckRepository


def _resolve_with_overrides(**kwargs: Any) -> AppConfig:
    """Resolve config, letting non-None CLI options take precedence."""
    return resolve_config({k: v for k, v in kwargs.items() if v is not None})


def _repo(config: AppConfig) -> JsonDeckRepository:
    return JsonDeckRepository(config.data_dir)


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise BackupFormatError(f"Invalid {what} {path}: not UTF-8 text") from e


def _echo_json(value: Any) -> None:
    if is_dataclass(value):
        value = asdict(value)
    typer.echo(json.dumps(value, indent=2, default=str))


def handle_errors(func: Callable) -> Callable:
    """Report LingoError in red and exit with status 1 instead of a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LingoError as e:
            typer.secho(str(e), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from e

    return wrapper
