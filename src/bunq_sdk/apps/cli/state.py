"""Shared CLI state carried on the typer context."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Coroutine, TypeVar

import httpx
import typer

from bunq_sdk.config.settings import BunqSettings, SettingsError, load_settings
from bunq_sdk.services.api.errors import BunqError

__all__ = ["CliState", "get_settings", "run_flow"]

T = TypeVar("T")


@dataclass
class CliState:
    config_path: Path | None = None
    _settings: BunqSettings | None = None

    def settings(self) -> BunqSettings:
        if self._settings is None:
            try:
                self._settings = load_settings(self.config_path)
            except SettingsError as exc:
                raise typer.BadParameter(str(exc), param_hint="--config") from exc
        return self._settings


def get_settings(ctx: typer.Context) -> BunqSettings:
    state = ctx.find_root().obj
    if not isinstance(state, CliState):
        state = CliState()
        ctx.find_root().obj = state
    return state.settings()


def run_flow(coro: Coroutine[Any, Any, T]) -> T:
    """Run a bootstrap coroutine, turning SDK and transport failures into exit code 1."""
    try:
        return asyncio.run(coro)
    except (BunqError, httpx.HTTPError) as exc:
        typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
