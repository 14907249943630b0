# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

import re
from typing import Optional, Union

from coreason_pubsub.exceptions import ValidationError
from coreason_pubsub.interfaces import ConceptRepository
from coreason_pubsub.schemas import Concept

_INTEGER = re.compile(r"[+-]?[0-9]+")

# Concept ids and codes are 32-bit signed integers
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def _is_integer(token: str) -> bool:
    return bool(_INTEGER.fullmatch(token)) and INT_MIN <= int(token) <= INT_MAX


class IdentifierResolver:
    """
    Resolves concept identifiers of the form "<id>" or "<source>:<code>".

    Lookups that find nothing return None; only malformed identifiers raise.
    """

    def __init__(self, repository: ConceptRepository):
        self.repository = repository

    def resolve_concept(self, identifier: Union[str, int]) -> Optional[Concept]:
        """
        Args:
            identifier: A concept id, or a string "123" or "SNOMED:22298006".

        Raises:
            ValidationError: If the identifier is blank, has more than one ':'
                or an id or code that is not a 32-bit integer.
        """
        if isinstance(identifier, bool):
            raise ValidationError(f"Identifier {identifier!r} must be a string or an integer, not a bool.")

        if isinstance(identifier, int):
            if not INT_MIN <= identifier <= INT_MAX:
                raise ValidationError(f"Concept id {identifier} is out of the 32-bit integer range.")
            return self.repository.get_concept_by_id(identifier)

        if identifier is None or not identifier.strip():
            raise ValidationError("blank identifier")

        identifier = identifier.strip()
        parts = identifier.split(":")

        if len(parts) == 1:
            if not _is_integer(identifier):
                raise ValidationError(
                    f"Identifier '{identifier}' has format 'id'. The id '{identifier}' must be an integer."
                )
            return self.repository.get_concept_by_id(int(identifier))

        if len(parts) == 2:
            source, code = parts[0].strip(), parts[1].strip()
            if not source:
                raise ValidationError(f"Identifier '{identifier}' has an empty source name.")
            if not _is_integer(code):
                raise ValidationError(
                    f"Identifier '{identifier}' has format 'source:code'. The code '{code}' must be an integer."
                )
            return self.repository.get_concept_by_mapping(source, code)

        raise ValidationError(f"Identifier '{identifier}' must contain only one ':'")
