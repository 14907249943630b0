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
from conftest import InMemorySettings, StaticIdentityProvider

from coreason_pubsub.exceptions import ConfigurationError, DanglingReferenceError
from coreason_pubsub.namespace import LocalNamespaceManager
from coreason_pubsub.repository import DuckDBConceptRepository
from coreason_pubsub.settings import LOCAL_NAMESPACE_UUID_KEY


def make_manager(
    repository: DuckDBConceptRepository, implementation_id: str | None = "ACME"
) -> LocalNamespaceManager:
    return LocalNamespaceManager(repository, InMemorySettings(), StaticIdentityProvider(implementation_id))


def test_create_local_namespace(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)

    source = manager.create_local_namespace()

    assert source.name == "ACME+local"
    assert source.description == "Local concept source of ACME"
    assert source.concept_source_id is not None
    assert manager.settings.get(LOCAL_NAMESPACE_UUID_KEY) == source.uuid
    assert repository.get_concept_source_by_uuid(source.uuid) == source


def test_get_returns_created_namespace(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)
    created = manager.create_local_namespace()

    assert manager.get_local_namespace().uuid == created.uuid
    assert manager.has_local_namespace() is True


@pytest.mark.parametrize("implementation_id", ["ACME", "clinic-42", "Kenya EMR"])
def test_name_follows_implementation_id(repository: DuckDBConceptRepository, implementation_id: str) -> None:
    manager = make_manager(repository, implementation_id)
    source = manager.create_local_namespace()
    assert source.name == f"{implementation_id}+local"
    assert manager.get_local_namespace().uuid == source.uuid


@pytest.mark.parametrize("implementation_id", [None, "", "   "])
def test_create_without_implementation_id(repository: DuckDBConceptRepository, implementation_id: str | None) -> None:
    manager = make_manager(repository, implementation_id)

    with pytest.raises(ConfigurationError, match="Implementation id is not set"):
        manager.create_local_namespace()

    assert manager.settings.get(LOCAL_NAMESPACE_UUID_KEY) == ""


def test_get_before_create(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)

    assert manager.has_local_namespace() is False
    with pytest.raises(ConfigurationError, match="create_local_namespace"):
        manager.get_local_namespace()


def test_get_with_blank_setting(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)
    manager.settings.set(LOCAL_NAMESPACE_UUID_KEY, "   ")

    with pytest.raises(ConfigurationError):
        manager.get_local_namespace()


def test_get_dangling_reference(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)
    manager.settings.set(LOCAL_NAMESPACE_UUID_KEY, "no-such-uuid")

    with pytest.raises(DanglingReferenceError) as exc_info:
        manager.get_local_namespace()

    assert exc_info.value.uuid == "no-such-uuid"
    assert exc_info.value.key == LOCAL_NAMESPACE_UUID_KEY
    # Dangling references are configuration errors too
    assert isinstance(exc_info.value, ConfigurationError)


def test_create_twice_creates_two_sources(repository: DuckDBConceptRepository) -> None:
    manager = make_manager(repository)

    first = manager.create_local_namespace()
    second = manager.create_local_namespace()

    assert first.uuid != second.uuid
    assert repository.get_concept_source_by_uuid(first.uuid) is not None
    assert manager.get_local_namespace().uuid == second.uuid


def test_setting_written_after_source_saved() -> None:
    repository = MagicMock()
    repository.save_concept_source.side_effect = RuntimeError("DB Error")
    settings = InMemorySettings()
    manager = LocalNamespaceManager(repository, settings, StaticIdentityProvider("ACME"))

    with pytest.raises(RuntimeError):
        manager.create_local_namespace()

    assert settings.writes == 0
