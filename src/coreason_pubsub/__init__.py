# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

"""
coreason-pubsub
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .adapters import ConceptMapAdapter, ReferenceTermAdapter, select_mapping_adapter
from .classifier import LocalityClassifier
from .exceptions import ConfigurationError, DanglingReferenceError, ValidationError
from .namespace import LocalNamespaceManager
from .resolver import IdentifierResolver
from .service import ConceptPubSubService, open_service
from .subscription import SubscriptionRegistry
from .synchronizer import MappingSynchronizer

__all__ = [
    "ConceptPubSubService",
    "open_service",
    "LocalNamespaceManager",
    "SubscriptionRegistry",
    "MappingSynchronizer",
    "IdentifierResolver",
    "LocalityClassifier",
    "ConceptMapAdapter",
    "ReferenceTermAdapter",
    "select_mapping_adapter",
    "ConfigurationError",
    "DanglingReferenceError",
    "ValidationError",
]
