# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from loguru import logger

from coreason_pubsub.interfaces import ConceptRepository, MappingAdapter
from coreason_pubsub.schemas import Concept, ConceptMap, ConceptSource


class ConceptMapAdapter:
    """
    Maps a concept by writing the source and code straight onto a concept_map row.
    The concept's own id is used as the code.
    """

    def __init__(self, repository: ConceptRepository):
        self.repository = repository

    def attach_mapping(self, concept: Concept, source: ConceptSource) -> bool:
        if concept.has_mapping_to(source) or self.repository.has_mapping(concept.concept_id, source):
            logger.debug(f"Concept {concept.concept_id} already mapped to '{source.name}'")
            return False

        code = str(concept.concept_id)
        self.repository.add_concept_map(concept.concept_id, source, code)
        concept.mappings.append(ConceptMap(source=source, code=code))
        return True


class ReferenceTermAdapter:
    """
    Maps a concept through a reference term (source, code), reusing the term
    when it already exists.
    """

    def __init__(self, repository: ConceptRepository):
        self.repository = repository

    def attach_mapping(self, concept: Concept, source: ConceptSource) -> bool:
        if concept.has_mapping_to(source) or self.repository.has_mapping(concept.concept_id, source):
            logger.debug(f"Concept {concept.concept_id} already mapped to '{source.name}'")
            return False

        code = str(concept.concept_id)
        term_id = self.repository.save_reference_term(source, code)
        self.repository.add_concept_map(concept.concept_id, source, code, reference_term_id=term_id)
        concept.mappings.append(ConceptMap(source=source, code=code, reference_term_id=term_id))
        return True


def select_mapping_adapter(repository: ConceptRepository) -> MappingAdapter:
    """
    Picks the mapping strategy the repository's schema supports.
    """
    if repository.supports_reference_terms():
        logger.info("Using reference term mapping strategy")
        return ReferenceTermAdapter(repository)
    logger.info("Using concept map mapping strategy")
    return ConceptMapAdapter(repository)
