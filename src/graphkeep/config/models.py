"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, graphkeep.toml only contains
overrides. A fresh project needs no config file at all. Section models
reject unknown keys so a typo fails loudly instead of being ignored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

JournalMode = Literal["wal", "delete", "truncate", "persist", "memory"]


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    path: str = "graph.db"
    journal_mode: JournalMode = "wal"
    enforce_foreign_keys: bool = False
    backup_legacy: bool = True


class DiscoveryConfig(BaseModel):
    """[discovery] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    pattern: str = "*.db"


class GkConfig(BaseModel):
    """The file-level shape of ``graphkeep.toml``.

    Top-level keys other than the sections (``verbose = true`` and the
    like) are settings fields and pass through untouched.
    """

    model_config = {"frozen": True}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
