# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from typing import List, Optional, Set

from loguru import logger

from coreason_pubsub.interfaces import ConceptRepository, SettingsStore
from coreason_pubsub.schemas import ConceptSource
from coreason_pubsub.settings import SUBSCRIBED_NAMESPACE_UUIDS_KEY


class SubscriptionRegistry:
    """
    Derives the subscribed (external) concept sources from settings.
    Nothing is cached; the setting is read on every call.
    """

    def __init__(self, repository: ConceptRepository, settings: SettingsStore):
        self.repository = repository
        self.settings = settings

    def get_subscribed_uuids(self) -> List[str]:
        """Returns the configured UUIDs in order, trimmed, without empty tokens."""
        raw = self.settings.get(SUBSCRIBED_NAMESPACE_UUIDS_KEY, "")
        return [token.strip() for token in raw.split(",") if token.strip()]

    def get_subscribed_namespaces(self) -> Set[Optional[ConceptSource]]:
        """
        Resolves every configured UUID to its concept source.

        A UUID with no matching source contributes None to the set instead of
        raising, so one stale entry does not break classification.
        """
        sources: Set[Optional[ConceptSource]] = set()
        for source_uuid in self.get_subscribed_uuids():
            source = self.repository.get_concept_source_by_uuid(source_uuid)
            if source is None:
                logger.warning(f"Subscribed concept source [{source_uuid}] does not exist")
            sources.add(source)
        return sources

    def subscribe(self, source_uuid: str) -> List[str]:
        uuids = self.get_subscribed_uuids()
        source_uuid = source_uuid.strip()
        if source_uuid and source_uuid not in uuids:
            uuids.append(source_uuid)
            self.settings.set(SUBSCRIBED_NAMESPACE_UUIDS_KEY, ",".join(uuids))
            logger.info(f"Subscribed to concept source [{source_uuid}]")
        return uuids

    def unsubscribe(self, source_uuid: str) -> List[str]:
        uuids = self.get_subscribed_uuids()
        source_uuid = source_uuid.strip()
        if source_uuid in uuids:
            uuids.remove(source_uuid)
            self.settings.set(SUBSCRIBED_NAMESPACE_UUIDS_KEY, ",".join(uuids))
            logger.info(f"Unsubscribed from concept source [{source_uuid}]")
        return uuids
