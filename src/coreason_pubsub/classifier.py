# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from coreason_pubsub.schemas import Concept
from coreason_pubsub.subscription import SubscriptionRegistry


class LocalityClassifier:
    """
    Tells locally authored concepts apart from those pulled from a subscribed source.
    """

    def __init__(self, registry: SubscriptionRegistry):
        self.registry = registry

    def is_local_concept(self, concept: Concept) -> bool:
        """
        Returns False as soon as one of the concept's mappings points into a
        subscribed source. Concepts without mappings are local.
        """
        subscribed = self.registry.get_subscribed_namespaces()
        subscribed_uuids = {source.uuid for source in subscribed if source is not None}

        for mapping in concept.mappings:
            if mapping.source.uuid in subscribed_uuids:
                return False

        return True
