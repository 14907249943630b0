# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

import uuid

from loguru import logger

from coreason_pubsub.exceptions import ConfigurationError, DanglingReferenceError
from coreason_pubsub.interfaces import ConceptRepository, ImplementationIdProvider, SettingsStore
from coreason_pubsub.schemas import ConceptSource
from coreason_pubsub.settings import (
    LOCAL_NAMESPACE_UUID_KEY,
    LOCAL_SOURCE_DESCRIPTION_PREFIX,
    LOCAL_SOURCE_NAME_POSTFIX,
)


class LocalNamespaceManager:
    """
    Owns the deployment's local concept source.

    The local source is an ordinary concept source; it is marked as local only
    by its UUID being stored under the local-namespace-uuid setting.
    """

    def __init__(
        self,
        repository: ConceptRepository,
        settings: SettingsStore,
        identity_provider: ImplementationIdProvider,
    ):
        self.repository = repository
        self.settings = settings
        self.identity_provider = identity_provider

    def create_local_namespace(self) -> ConceptSource:
        """
        Creates a concept source named after the implementation id and records
        it as the local namespace.

        Every call creates a new source and replaces the recorded UUID. Callers
        that must not re-create it should check has_local_namespace() first.

        Raises:
            ConfigurationError: If the implementation id is not set.
        """
        implementation_id = self.identity_provider.get_implementation_id()
        if not implementation_id or not implementation_id.strip():
            logger.error("Cannot create local namespace: implementation id is not set")
            raise ConfigurationError("Implementation id is not set")

        source = ConceptSource(
            uuid=str(uuid.uuid4()),
            name=implementation_id + LOCAL_SOURCE_NAME_POSTFIX,
            description=LOCAL_SOURCE_DESCRIPTION_PREFIX + implementation_id,
        )
        source = self.repository.save_concept_source(source)
        self.settings.set(LOCAL_NAMESPACE_UUID_KEY, source.uuid)

        logger.info(f"Created local namespace '{source.name}' [{source.uuid}]")
        return source

    def get_local_namespace(self) -> ConceptSource:
        """
        Returns the concept source recorded as the local namespace.

        Raises:
            ConfigurationError: If no local namespace has been recorded.
            DanglingReferenceError: If the recorded UUID matches no concept source.
        """
        source_uuid = self.settings.get(LOCAL_NAMESPACE_UUID_KEY, "").strip()
        if not source_uuid:
            raise ConfigurationError(
                f"Local concept source is not set in the '{LOCAL_NAMESPACE_UUID_KEY}' setting. "
                "Call create_local_namespace() to have it set automatically."
            )

        source = self.repository.get_concept_source_by_uuid(source_uuid)
        if source is None:
            logger.error(f"Local namespace [{source_uuid}] does not exist")
            raise DanglingReferenceError(LOCAL_NAMESPACE_UUID_KEY, source_uuid)

        return source

    def has_local_namespace(self) -> bool:
        return bool(self.settings.get(LOCAL_NAMESPACE_UUID_KEY, "").strip())
