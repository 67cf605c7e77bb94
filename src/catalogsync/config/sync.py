"""Reconciliation defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import positive_int_env

DEFAULT_PROVIDER = "square"
DEFAULT_LOCK_NAME = "catalogUpdate"
DEFAULT_TRANSACTION_ATTEMPTS = 5


@dataclass(frozen=True, slots=True)
class SyncConfig:
    provider: str = DEFAULT_PROVIDER
    lock_name: str = DEFAULT_LOCK_NAME
    transaction_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        provider=os.getenv("CATALOGSYNC_PROVIDER") or DEFAULT_PROVIDER,
        lock_name=os.getenv("CATALOGSYNC_LOCK_NAME") or DEFAULT_LOCK_NAME,
        transaction_attempts=positive_int_env(
            "CATALOGSYNC_TRANSACTION_ATTEMPTS", DEFAULT_TRANSACTION_ATTEMPTS
        ),
    )
