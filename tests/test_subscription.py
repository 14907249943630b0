# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

from unittest.mock import MagicMock

import pytest
from conftest import RXNORM, SNOMED, InMemorySettings

from coreason_pubsub.repository import DuckDBConceptRepository
from coreason_pubsub.settings import SUBSCRIBED_NAMESPACE_UUIDS_KEY
from coreason_pubsub.subscription import SubscriptionRegistry


def make_registry(repository: DuckDBConceptRepository, value: str | None = None) -> SubscriptionRegistry:
    settings = InMemorySettings()
    if value is not None:
        settings.set(SUBSCRIBED_NAMESPACE_UUIDS_KEY, value)
    return SubscriptionRegistry(repository, settings)


def test_tokens_are_trimmed() -> None:
    repository = MagicMock()
    repository.get_concept_source_by_uuid.side_effect = lambda u: SNOMED.model_copy(update={"uuid": u})
    registry = SubscriptionRegistry(repository, InMemorySettings({SUBSCRIBED_NAMESPACE_UUIDS_KEY: "u1, u2,u3"}))

    sources = registry.get_subscribed_namespaces()

    looked_up = [c.args[0] for c in repository.get_concept_source_by_uuid.call_args_list]
    assert looked_up == ["u1", "u2", "u3"]
    assert {s.uuid for s in sources if s is not None} == {"u1", "u2", "u3"}


@pytest.mark.parametrize("value", [None, "", "  ", ",", " , ,"])
def test_empty_configuration(repository: DuckDBConceptRepository, value: str | None) -> None:
    registry = make_registry(repository, value)
    assert registry.get_subscribed_namespaces() == set()


def test_resolves_sources(repository: DuckDBConceptRepository) -> None:
    registry = make_registry(repository, f"{SNOMED.uuid},{RXNORM.uuid}")
    assert registry.get_subscribed_namespaces() == {SNOMED, RXNORM}


def test_unknown_uuid_yields_none(repository: DuckDBConceptRepository) -> None:
    registry = make_registry(repository, f"{SNOMED.uuid}, missing-uuid")

    sources = registry.get_subscribed_namespaces()

    assert sources == {SNOMED, None}


def test_not_cached(repository: DuckDBConceptRepository) -> None:
    registry = make_registry(repository, SNOMED.uuid)
    assert registry.get_subscribed_namespaces() == {SNOMED}

    registry.settings.set(SUBSCRIBED_NAMESPACE_UUIDS_KEY, RXNORM.uuid)
    assert registry.get_subscribed_namespaces() == {RXNORM}


def test_subscribe_and_unsubscribe(repository: DuckDBConceptRepository) -> None:
    registry = make_registry(repository)

    assert registry.subscribe(SNOMED.uuid) == [SNOMED.uuid]
    assert registry.subscribe(f" {RXNORM.uuid} ") == [SNOMED.uuid, RXNORM.uuid]
    # Already present
    assert registry.subscribe(SNOMED.uuid) == [SNOMED.uuid, RXNORM.uuid]
    assert registry.settings.get(SUBSCRIBED_NAMESPACE_UUIDS_KEY) == f"{SNOMED.uuid},{RXNORM.uuid}"

    assert registry.unsubscribe(SNOMED.uuid) == [RXNORM.uuid]
    assert registry.unsubscribe("not-subscribed") == [RXNORM.uuid]
    assert registry.get_subscribed_namespaces() == {RXNORM}
