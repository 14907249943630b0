# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from typing import Optional

from loguru import logger

from coreason_pubsub.interfaces import ConceptRepository, MappingAdapter
from coreason_pubsub.namespace import LocalNamespaceManager
from coreason_pubsub.schemas import Concept, ConceptSource, SyncReport

BATCH_SIZE = 1000


class MappingSynchronizer:
    """
    Ensures concepts carry a mapping into the local namespace.

    The bulk run is a full scan with no checkpoint: an interrupted run is
    restarted from the first page, and the mapping adapter's deduplication
    keeps the restart from writing duplicates.
    """

    def __init__(
        self,
        repository: ConceptRepository,
        namespace_manager: LocalNamespaceManager,
        mapping_adapter: MappingAdapter,
        batch_size: int = BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.repository = repository
        self.namespace_manager = namespace_manager
        self.mapping_adapter = mapping_adapter
        self.batch_size = batch_size

    def add_local_mapping_to_concept(self, concept: Concept, local_source: Optional[ConceptSource] = None) -> bool:
        """
        Maps concept into the local namespace.

        Args:
            concept: The concept to map.
            local_source: The local namespace, when the caller already resolved it.

        Returns:
            bool: True if a mapping was written, False if one already existed.
        """
        if local_source is None:
            local_source = self.namespace_manager.get_local_namespace()
        return self.mapping_adapter.attach_mapping(concept, local_source)

    def add_local_mappings_to_all_concepts(self) -> SyncReport:
        """
        Pages through every concept by ascending id and maps each one into the
        local namespace. Stops after the first page shorter than the batch size.
        """
        local_source = self.namespace_manager.get_local_namespace()
        report = SyncReport()
        logger.info(f"Synchronizing local mappings to '{local_source.name}' (batch size {self.batch_size})")

        position = 0
        while True:
            concepts = self.repository.list_concepts(position, self.batch_size)
            report.batches_fetched += 1

            for concept in concepts:
                if self.add_local_mapping_to_concept(concept, local_source):
                    report.mappings_created += 1
            report.concepts_processed += len(concepts)

            if len(concepts) < self.batch_size:
                break

            logger.info(f"Processed batch at offset {position} ({len(concepts)} concepts)")
            position += self.batch_size

        logger.info(
            f"Synchronization complete: {report.concepts_processed} concepts, "
            f"{report.mappings_created} new mappings, {report.batches_fetched} batches"
        )
        return report
