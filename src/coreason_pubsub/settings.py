# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

import os
from typing import Optional

import duckdb
from loguru import logger

from coreason_pubsub.interfaces import SettingsStore

# Setting keys
LOCAL_NAMESPACE_UUID_KEY = "local-namespace-uuid"
SUBSCRIBED_NAMESPACE_UUIDS_KEY = "subscribed-namespace-uuids"
IMPLEMENTATION_ID_KEY = "implementation-id"

# Naming of the local concept source
LOCAL_SOURCE_NAME_POSTFIX = "+local"
LOCAL_SOURCE_DESCRIPTION_PREFIX = "Local concept source of "

DEFAULT_DB_PATH = "./data/pubsub.duckdb"


def get_db_path() -> str:
    """Returns the database path from PUBSUB_DB_PATH or the default."""
    return os.getenv("PUBSUB_DB_PATH", DEFAULT_DB_PATH)


class DuckDBSettingsStore:
    """
    Settings store backed by the global_property table.

    Values are read on every call; another process may change them.
    """

    def __init__(self, duckdb_conn: duckdb.DuckDBPyConnection):
        self.duckdb_conn = duckdb_conn

        # Verify table exists
        try:
            self.duckdb_conn.execute("SELECT 1 FROM global_property LIMIT 1")
        except Exception as e:
            logger.error(f"Table 'global_property' not found or invalid: {e}")
            raise ValueError("Table 'global_property' is missing in the database.") from e

    def get(self, key: str, default: str = "") -> str:
        row = self.duckdb_conn.execute(
            "SELECT property_value FROM global_property WHERE property = ?", [key]
        ).fetchone()
        if row is None or row[0] is None:
            return default
        return str(row[0])

    def set(self, key: str, value: str) -> None:
        exists = self.duckdb_conn.execute("SELECT 1 FROM global_property WHERE property = ?", [key]).fetchone()
        if exists:
            self.duckdb_conn.execute("UPDATE global_property SET property_value = ? WHERE property = ?", [value, key])
        else:
            self.duckdb_conn.execute("INSERT INTO global_property VALUES (?, ?)", [key, value])
        logger.debug(f"Setting '{key}' updated")


class SettingsImplementationIdProvider:
    """
    Reads the implementation id from the settings store.
    """

    def __init__(self, settings: SettingsStore, key: str = IMPLEMENTATION_ID_KEY):
        self.settings = settings
        self.key = key

    def get_implementation_id(self) -> Optional[str]:
        value = self.settings.get(self.key, "").strip()
        return value or None
