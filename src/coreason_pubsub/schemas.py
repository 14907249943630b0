# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ConceptSource(BaseModel):
    """
    A namespace a concept can be mapped into.

    Frozen so sources can be collected in sets. Whether a source is the
    deployment's local namespace is recorded in settings, not here.
    """

    model_config = ConfigDict(frozen=True)

    concept_source_id: Optional[int] = None
    uuid: str
    name: str
    description: str = ""
    hl7_code: Optional[str] = None

    @classmethod
    def from_row(cls, row: Tuple[Any, ...]) -> "ConceptSource":
        """
        Creates a ConceptSource from a DuckDB row tuple.
        Assumes row order: id, uuid, name, description, hl7_code.
        """
        return cls(
            concept_source_id=row[0],
            uuid=row[1],
            name=row[2],
            description=row[3] or "",
            hl7_code=row[4],
        )


class ConceptMap(BaseModel):
    source: ConceptSource
    code: str
    reference_term_id: Optional[int] = None


class Concept(BaseModel):
    concept_id: int
    concept_name: Optional[str] = None
    mappings: List[ConceptMap] = Field(default_factory=list)

    def has_mapping_to(self, source: ConceptSource) -> bool:
        return any(m.source.uuid == source.uuid for m in self.mappings)


class SyncReport(BaseModel):
    """Outcome of a full mapping synchronization run."""

    concepts_processed: int = 0
    mappings_created: int = 0
    batches_fetched: int = 0
