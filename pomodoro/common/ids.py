"""Identifier generator protocol for dependency injection."""

import uuid
from typing import Protocol


class IdentifierGenerator(Protocol):
    """Protocol for producers of unique timer identifiers."""

    def new_id(self) -> str:
        """Return a new, globally unique, non-empty identifier."""
        ...


class UUIDGenerator:
    """Identifier generator backed by random UUIDs."""

    def new_id(self) -> str:
        """Return a random UUID4 as a 32 character hex string."""
        return uuid.uuid4().hex
