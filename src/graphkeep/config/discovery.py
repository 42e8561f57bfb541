"""Locate and read ``graphkeep.toml``.

The file is found the way git finds ``.git/``: walk up from the working
directory until one turns up. ``GRAPHKEEP_CONFIG`` (or ``--config``)
names a file directly and disables the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from graphkeep.config.models import GkConfig

CONFIG_FILENAME = "graphkeep.toml"
CONFIG_ENV_VAR = "GRAPHKEEP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``graphkeep.toml`` at or above *start* (default: cwd).

    When ``GRAPHKEEP_CONFIG`` is set it is the only candidate: a missing
    file there means no config, not a fallback to the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        named = Path(env_path)
        return named if named.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* and check its sections against :class:`GkConfig`.

    The raw table is returned (not the model) so settings sources can
    layer it under environment variables key by key.

    Raises:
        click.ClickException: The file is not TOML, or a section holds
            an unknown key or a value of the wrong type.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
    try:
        GkConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid config in {path}: {exc}"
        raise click.ClickException(msg) from exc
    return data
