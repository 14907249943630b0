# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from typing import ContextManager, List, Optional, Protocol

from coreason_pubsub.schemas import Concept, ConceptSource


class SettingsStore(Protocol):
    """
    Protocol for durable string-valued settings keyed by name.
    """

    def get(self, key: str, default: str = "") -> str:
        """
        Returns the value stored under key, or default when unset.
        """
        ...

    def set(self, key: str, value: str) -> None:
        """
        Stores value under key, replacing any previous value.
        """
        ...


class ImplementationIdProvider(Protocol):
    """
    Protocol for the deployment-wide implementation identity.
    """

    def get_implementation_id(self) -> Optional[str]: ...


class ConceptRepository(Protocol):
    """
    Protocol for the concept store: paginated retrieval, lookups and the
    write primitives needed to attach mappings.
    """

    def list_concepts(self, offset: int, limit: int) -> List[Concept]:
        """
        Returns up to limit concepts ordered by concept_id ascending.
        """
        ...

    def get_concept_by_id(self, concept_id: int) -> Optional[Concept]: ...

    def get_concept_by_mapping(self, source_name: str, code: str) -> Optional[Concept]: ...

    def get_concept_source_by_uuid(self, uuid: str) -> Optional[ConceptSource]: ...

    def save_concept_source(self, source: ConceptSource) -> ConceptSource:
        """
        Persists a new concept source and returns it with its id assigned.
        """
        ...

    def has_mapping(self, concept_id: int, source: ConceptSource) -> bool: ...

    def add_concept_map(
        self, concept_id: int, source: ConceptSource, code: str, reference_term_id: Optional[int] = None
    ) -> None: ...

    def save_reference_term(self, source: ConceptSource, code: str) -> int:
        """
        Returns the id of the reference term (source, code), creating it if needed.
        """
        ...

    def supports_reference_terms(self) -> bool: ...

    def transaction(self) -> ContextManager[None]: ...


class MappingAdapter(Protocol):
    """
    Strategy for attaching a mapping from a concept source to a concept.
    """

    def attach_mapping(self, concept: Concept, source: ConceptSource) -> bool:
        """
        Attaches a mapping and returns True, or returns False if the concept
        is already mapped into source.
        """
        ...
