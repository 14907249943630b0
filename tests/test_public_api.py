# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

import coreason_pubsub


def test_public_api_exposure() -> None:
    """
    Verify that the core classes and functions are exposed at the package level.
    """
    expected_symbols = [
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

    for symbol in expected_symbols:
        assert hasattr(coreason_pubsub, symbol), f"{symbol} not exposed in coreason_pubsub"


def test_open_service_callable() -> None:
    assert callable(coreason_pubsub.open_service)


def test_version_exposure() -> None:
    assert hasattr(coreason_pubsub, "__version__")
    assert isinstance(coreason_pubsub.__version__, str)
