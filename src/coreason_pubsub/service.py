# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from pathlib import Path
from typing import List, Optional, Set, Union

from coreason_pubsub.adapters import select_mapping_adapter
from coreason_pubsub.classifier import LocalityClassifier
from coreason_pubsub.interfaces import ConceptRepository, ImplementationIdProvider, MappingAdapter, SettingsStore
from coreason_pubsub.namespace import LocalNamespaceManager
from coreason_pubsub.repository import DuckDBConceptRepository, connect_database, initialize_schema, table_exists
from coreason_pubsub.resolver import IdentifierResolver
from coreason_pubsub.schemas import Concept, ConceptSource, SyncReport
from coreason_pubsub.settings import DuckDBSettingsStore, SettingsImplementationIdProvider, get_db_path
from coreason_pubsub.subscription import SubscriptionRegistry
from coreason_pubsub.synchronizer import BATCH_SIZE, MappingSynchronizer
from coreason_pubsub.utils.logger import logger


class ConceptPubSubService:
    """
    Facade over the concept identity operations.

    Collaborators are passed in; the mapping strategy is fixed at construction.
    Every public operation runs inside one repository transaction.
    """

    def __init__(
        self,
        repository: ConceptRepository,
        settings: SettingsStore,
        identity_provider: ImplementationIdProvider,
        mapping_adapter: Optional[MappingAdapter] = None,
        batch_size: int = BATCH_SIZE,
    ):
        self.repository = repository
        self.settings = settings
        self.mapping_adapter = mapping_adapter or select_mapping_adapter(repository)

        self.namespaces = LocalNamespaceManager(repository, settings, identity_provider)
        self.registry = SubscriptionRegistry(repository, settings)
        self.synchronizer = MappingSynchronizer(repository, self.namespaces, self.mapping_adapter, batch_size)
        self.resolver = IdentifierResolver(repository)
        self.classifier = LocalityClassifier(self.registry)

    def create_local_namespace(self) -> ConceptSource:
        with self.repository.transaction():
            return self.namespaces.create_local_namespace()

    def get_local_namespace(self) -> ConceptSource:
        with self.repository.transaction():
            return self.namespaces.get_local_namespace()

    def has_local_namespace(self) -> bool:
        return self.namespaces.has_local_namespace()

    def add_local_mapping_to_concept(self, concept: Union[Concept, int]) -> bool:
        """
        Maps one concept into the local namespace.

        Raises:
            ValueError: If concept is an id that matches no concept.
        """
        with self.repository.transaction():
            return self.synchronizer.add_local_mapping_to_concept(self._require_concept(concept))

    def add_local_mappings_to_all_concepts(self) -> SyncReport:
        with self.repository.transaction():
            return self.synchronizer.add_local_mappings_to_all_concepts()

    def get_subscribed_namespaces(self) -> Set[Optional[ConceptSource]]:
        with self.repository.transaction():
            return self.registry.get_subscribed_namespaces()

    def subscribe(self, source_uuid: str) -> List[str]:
        with self.repository.transaction():
            return self.registry.subscribe(source_uuid)

    def unsubscribe(self, source_uuid: str) -> List[str]:
        with self.repository.transaction():
            return self.registry.unsubscribe(source_uuid)

    def is_local_concept(self, concept: Union[Concept, int]) -> bool:
        with self.repository.transaction():
            return self.classifier.is_local_concept(self._require_concept(concept))

    def resolve_concept(self, identifier: Union[str, int]) -> Optional[Concept]:
        with self.repository.transaction():
            return self.resolver.resolve_concept(identifier)

    def _require_concept(self, concept: Union[Concept, int]) -> Concept:
        if isinstance(concept, Concept):
            return concept
        found = self.repository.get_concept_by_id(concept)
        if found is None:
            raise ValueError(f"Concept {concept} not found")
        return found


def open_service(
    db_path: Optional[Union[str, Path]] = None,
    batch_size: int = BATCH_SIZE,
    reference_terms: Optional[bool] = None,
) -> ConceptPubSubService:
    """
    Opens (and if needed initializes) the DuckDB database and wires the service.

    Args:
        db_path: Database file. Defaults to PUBSUB_DB_PATH.
        batch_size: Page size for the bulk synchronizer.
        reference_terms: Whether to create the reference term table. By default
            it is created only for a new database, so an existing schema keeps
            its mapping strategy.
    """
    path = db_path if db_path is not None else get_db_path()
    logger.info(f"Opening concept pub/sub service on {path}")

    con = connect_database(path)
    if reference_terms is None:
        reference_terms = not table_exists(con, "concept")
    initialize_schema(con, reference_terms=reference_terms)

    repository = DuckDBConceptRepository(con)
    settings = DuckDBSettingsStore(con)
    return ConceptPubSubService(
        repository=repository,
        settings=settings,
        identity_provider=SettingsImplementationIdProvider(settings),
        batch_size=batch_size,
    )
