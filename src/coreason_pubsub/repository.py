# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import duckdb
from loguru import logger

from coreason_pubsub.schemas import Concept, ConceptMap, ConceptSource

SCHEMA_STATEMENTS = [
    "CREATE SEQUENCE IF NOT EXISTS seq_concept_source START 1",
    "CREATE SEQUENCE IF NOT EXISTS seq_concept_map START 1",
    """
    CREATE TABLE IF NOT EXISTS concept (
        concept_id INTEGER PRIMARY KEY,
        concept_name VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS concept_source (
        concept_source_id INTEGER PRIMARY KEY,
        uuid VARCHAR NOT NULL UNIQUE,
        name VARCHAR NOT NULL,
        description VARCHAR,
        hl7_code VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS concept_map (
        concept_map_id INTEGER PRIMARY KEY,
        concept_id INTEGER NOT NULL,
        concept_source_id INTEGER NOT NULL,
        source_code VARCHAR NOT NULL,
        concept_reference_term_id INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS global_property (
        property VARCHAR PRIMARY KEY,
        property_value VARCHAR
    )
    """,
]

REFERENCE_TERM_STATEMENTS = [
    "CREATE SEQUENCE IF NOT EXISTS seq_concept_reference_term START 1",
    """
    CREATE TABLE IF NOT EXISTS concept_reference_term (
        concept_reference_term_id INTEGER PRIMARY KEY,
        concept_source_id INTEGER NOT NULL,
        code VARCHAR NOT NULL
    )
    """,
]

INDEX_STATEMENTS = [
    "CREATE INDEX IF NOT EXISTS idx_concept_map_concept ON concept_map(concept_id)",
    "CREATE INDEX IF NOT EXISTS idx_concept_map_source ON concept_map(concept_source_id, source_code)",
]

_SOURCE_COLUMNS = "cs.concept_source_id, cs.uuid, cs.name, cs.description, cs.hl7_code"


def table_exists(con: duckdb.DuckDBPyConnection, table_name: str) -> bool:
    row = con.execute(
        "SELECT count(*) FROM information_schema.tables WHERE table_name = ?", [table_name]
    ).fetchone()
    return bool(row and row[0])


def initialize_schema(con: duckdb.DuckDBPyConnection, reference_terms: bool = True) -> None:
    """
    Creates the concept, mapping and settings tables if they do not exist.

    Args:
        con: Open DuckDB connection.
        reference_terms: Also create the concept_reference_term table. Databases
            without it are mapped with plain concept_map rows.
    """
    statements = list(SCHEMA_STATEMENTS)
    if reference_terms:
        statements.extend(REFERENCE_TERM_STATEMENTS)
    statements.extend(INDEX_STATEMENTS)

    for statement in statements:
        con.execute(statement)
    logger.info(f"Schema ready (reference terms: {reference_terms})")


def connect_database(db_path: Union[str, Path], read_only: bool = False) -> duckdb.DuckDBPyConnection:
    """
    Opens the DuckDB database at db_path, creating its directory when writable.
    """
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Connecting to DuckDB at {path}")
    try:
        con = duckdb.connect(str(path), read_only=read_only)
        # Verify it's a valid DB by running a simple query
        con.execute("SELECT 1")
    except Exception as e:
        logger.error(f"Failed to connect to DuckDB: {e}")
        raise ValueError(f"Failed to initialize DuckDB connection: {e}") from e
    return con


class DuckDBConceptRepository:
    """
    Concept store over the concept, concept_source and concept_map tables.
    """

    def __init__(self, duckdb_conn: duckdb.DuckDBPyConnection):
        self.duckdb_conn = duckdb_conn
        self._depth = 0

        # Verify tables exist
        for table in ("concept", "concept_source", "concept_map"):
            try:
                self.duckdb_conn.execute(f"SELECT 1 FROM {table} LIMIT 1")
            except Exception as e:
                logger.error(f"Table '{table}' not found or invalid: {e}")
                raise ValueError(f"Table '{table}' is missing in the database.") from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Runs the enclosed block in one transaction. Nested blocks join the
        outermost transaction.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self.duckdb_conn.begin()
        self._depth = 1
        try:
            yield
        except BaseException:
            self._depth = 0
            self.duckdb_conn.rollback()
            raise
        self._depth = 0
        self.duckdb_conn.commit()

    def list_concepts(self, offset: int, limit: int) -> List[Concept]:
        query = f"SELECT concept_id, concept_name FROM concept ORDER BY concept_id LIMIT {int(limit)} OFFSET {int(offset)}"
        rows = self.duckdb_conn.execute(query).fetchall()
        return self._hydrate(rows)

    def get_concept_by_id(self, concept_id: int) -> Optional[Concept]:
        rows = self.duckdb_conn.execute(
            "SELECT concept_id, concept_name FROM concept WHERE concept_id = ?", [concept_id]
        ).fetchall()
        concepts = self._hydrate(rows)
        return concepts[0] if concepts else None

    def get_concept_by_mapping(self, source_name: str, code: str) -> Optional[Concept]:
        """
        Finds the concept mapped to code in the source whose name (case-insensitive)
        or HL7 code equals source_name.
        """
        query = """
            SELECT c.concept_id, c.concept_name
            FROM concept_map cm
            JOIN concept_source cs ON cm.concept_source_id = cs.concept_source_id
            JOIN concept c ON cm.concept_id = c.concept_id
            WHERE (lower(cs.name) = lower(?) OR cs.hl7_code = ?)
              AND cm.source_code = ?
            ORDER BY c.concept_id
            LIMIT 1
        """
        rows = self.duckdb_conn.execute(query, [source_name, source_name, code]).fetchall()
        concepts = self._hydrate(rows)
        return concepts[0] if concepts else None

    def get_concept_source_by_uuid(self, uuid: str) -> Optional[ConceptSource]:
        row = self.duckdb_conn.execute(
            f"SELECT {_SOURCE_COLUMNS} FROM concept_source cs WHERE cs.uuid = ?", [uuid]
        ).fetchone()
        return ConceptSource.from_row(row) if row else None

    def save_concept_source(self, source: ConceptSource) -> ConceptSource:
        row = self.duckdb_conn.execute("SELECT nextval('seq_concept_source')").fetchone()
        if row is None:
            raise RuntimeError("Failed to allocate a concept_source id")
        source_id = int(row[0])

        self.duckdb_conn.execute(
            "INSERT INTO concept_source VALUES (?, ?, ?, ?, ?)",
            [source_id, source.uuid, source.name, source.description, source.hl7_code],
        )
        logger.info(f"Saved concept source '{source.name}' [{source.uuid}]")
        return source.model_copy(update={"concept_source_id": source_id})

    def has_mapping(self, concept_id: int, source: ConceptSource) -> bool:
        query = """
            SELECT 1
            FROM concept_map cm
            JOIN concept_source cs ON cm.concept_source_id = cs.concept_source_id
            WHERE cm.concept_id = ?
              AND cs.uuid = ?
            LIMIT 1
        """
        return self.duckdb_conn.execute(query, [concept_id, source.uuid]).fetchone() is not None

    def add_concept_map(
        self, concept_id: int, source: ConceptSource, code: str, reference_term_id: Optional[int] = None
    ) -> None:
        source_id = self._require_source_id(source)
        self.duckdb_conn.execute(
            "INSERT INTO concept_map VALUES (nextval('seq_concept_map'), ?, ?, ?, ?)",
            [concept_id, source_id, code, reference_term_id],
        )

    def save_reference_term(self, source: ConceptSource, code: str) -> int:
        source_id = self._require_source_id(source)
        row = self.duckdb_conn.execute(
            "SELECT concept_reference_term_id FROM concept_reference_term WHERE concept_source_id = ? AND code = ?",
            [source_id, code],
        ).fetchone()
        if row is not None:
            return int(row[0])

        row = self.duckdb_conn.execute("SELECT nextval('seq_concept_reference_term')").fetchone()
        if row is None:
            raise RuntimeError("Failed to allocate a concept_reference_term id")
        term_id = int(row[0])
        self.duckdb_conn.execute("INSERT INTO concept_reference_term VALUES (?, ?, ?)", [term_id, source_id, code])
        return term_id

    def supports_reference_terms(self) -> bool:
        return table_exists(self.duckdb_conn, "concept_reference_term")

    def _require_source_id(self, source: ConceptSource) -> int:
        if source.concept_source_id is not None:
            return source.concept_source_id
        stored = self.get_concept_source_by_uuid(source.uuid)
        if stored is None or stored.concept_source_id is None:
            raise ValueError(f"Concept source [{source.uuid}] has not been saved.")
        return stored.concept_source_id

    def _hydrate(self, rows: List[Tuple[Any, ...]]) -> List[Concept]:
        """Attaches mappings to concept rows, keeping row order."""
        if not rows:
            return []

        concept_ids = [r[0] for r in rows]
        query = f"""
            SELECT cm.concept_id, {_SOURCE_COLUMNS}, cm.source_code, cm.concept_reference_term_id
            FROM concept_map cm
            JOIN concept_source cs ON cm.concept_source_id = cs.concept_source_id
            WHERE cm.concept_id IN ({",".join(["?"] * len(concept_ids))})
            ORDER BY cm.concept_map_id
        """
        mappings: Dict[int, List[ConceptMap]] = {cid: [] for cid in concept_ids}
        for row in self.duckdb_conn.execute(query, concept_ids).fetchall():
            # Row order: concept id, 5 source columns, code, reference term id
            mappings[row[0]].append(
                ConceptMap(source=ConceptSource.from_row(row[1:6]), code=row[6], reference_term_id=row[7])
            )

        return [Concept(concept_id=r[0], concept_name=r[1], mappings=mappings[r[0]]) for r in rows]
