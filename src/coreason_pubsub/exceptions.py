# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub


class PubSubError(Exception):
    """Base class for concept pub/sub errors."""


class ConfigurationError(PubSubError, RuntimeError):
    """
    Required configuration is missing or inconsistent.

    Raised when the implementation id is not set, the local namespace has not
    been bootstrapped, or a configured UUID does not match any record.
    """


class DanglingReferenceError(ConfigurationError):
    """A configured UUID points at a concept source that does not exist."""

    def __init__(self, key: str, uuid: str):
        self.key = key
        self.uuid = uuid
        super().__init__(
            f"Concept source [{uuid}] set in the '{key}' setting does not exist. "
            "Set it to an existing concept source."
        )


class ValidationError(PubSubError, ValueError):
    """A concept identifier string is malformed."""
