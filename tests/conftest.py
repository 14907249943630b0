# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from typing import Dict, Generator, Optional

import duckdb
import pytest

from coreason_pubsub.repository import DuckDBConceptRepository, initialize_schema
from coreason_pubsub.schemas import ConceptSource
from coreason_pubsub.settings import DuckDBSettingsStore

# --- Mocks ---


class InMemorySettings:
    """Dict-backed settings store."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(values or {})
        self.writes = 0

    def get(self, key: str, default: str = "") -> str:
        return self.values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1


class StaticIdentityProvider:
    def __init__(self, implementation_id: Optional[str]):
        self.implementation_id = implementation_id

    def get_implementation_id(self) -> Optional[str]:
        return self.implementation_id


SNOMED = ConceptSource(
    concept_source_id=1, uuid="b6e4b6f0-snomed", name="SNOMED CT", description="SNOMED", hl7_code="SCT"
)
RXNORM = ConceptSource(concept_source_id=2, uuid="c1a2d3e4-rxnorm", name="RxNorm", description="RxNorm")

# 312327: Acute myocardial infarction (SNOMED 22298006)
# 1125315: Acetaminophen (RxNorm 161)
# 1503297: Metformin (RxNorm 6809)
# 201820, 31967: no mappings
CONCEPTS = [
    (31967, "Nausea"),
    (201820, "Diabetes mellitus"),
    (312327, "Acute myocardial infarction"),
    (1125315, "Acetaminophen"),
    (1503297, "Metformin"),
]
MAPPINGS = [
    (312327, SNOMED, "22298006"),
    (1125315, RXNORM, "161"),
    (1503297, RXNORM, "6809"),
]


def seed(con: duckdb.DuckDBPyConnection) -> None:
    con.executemany("INSERT INTO concept VALUES (?, ?)", CONCEPTS)
    for source in (SNOMED, RXNORM):
        con.execute(
            "INSERT INTO concept_source VALUES (?, ?, ?, ?, ?)",
            [source.concept_source_id, source.uuid, source.name, source.description, source.hl7_code],
        )
    # Keep the sequence ahead of the seeded ids
    con.execute("SELECT nextval('seq_concept_source')")
    con.execute("SELECT nextval('seq_concept_source')")
    for concept_id, source, code in MAPPINGS:
        con.execute(
            "INSERT INTO concept_map VALUES (nextval('seq_concept_map'), ?, ?, ?, NULL)",
            [concept_id, source.concept_source_id, code],
        )


def count_mappings(con: duckdb.DuckDBPyConnection, source_uuid: Optional[str] = None) -> int:
    if source_uuid is None:
        row = con.execute("SELECT count(*) FROM concept_map").fetchone()
    else:
        row = con.execute(
            """
            SELECT count(*) FROM concept_map cm
            JOIN concept_source cs ON cm.concept_source_id = cs.concept_source_id
            WHERE cs.uuid = ?
            """,
            [source_uuid],
        ).fetchone()
    assert row is not None
    return int(row[0])


# --- Fixtures ---


@pytest.fixture
def duckdb_conn() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """In-memory database with the full schema (reference terms included) and sample data."""
    con = duckdb.connect(":memory:")
    initialize_schema(con, reference_terms=True)
    seed(con)
    yield con
    con.close()


@pytest.fixture
def plain_duckdb_conn() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """In-memory database without the reference term table."""
    con = duckdb.connect(":memory:")
    initialize_schema(con, reference_terms=False)
    seed(con)
    yield con
    con.close()


@pytest.fixture
def repository(duckdb_conn: duckdb.DuckDBPyConnection) -> DuckDBConceptRepository:
    return DuckDBConceptRepository(duckdb_conn)


@pytest.fixture
def settings_store(duckdb_conn: duckdb.DuckDBPyConnection) -> DuckDBSettingsStore:
    return DuckDBSettingsStore(duckdb_conn)


@pytest.fixture
def memory_settings() -> InMemorySettings:
    return InMemorySettings()
