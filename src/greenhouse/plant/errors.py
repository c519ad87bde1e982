"""Errors raised by plant stores and the plant API.

Stores raise NotFoundError, ConflictError and StorageError. The API layer
raises ValidationError (and PayloadError) before any store is touched and
decides the HTTP-visible message for all of them.
"""

from __future__ import annotations


class PlantError(Exception):
    """Base class for plant errors."""


class ValidationError(PlantError):
    """Raised when a request fails validation; carries every violation."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class PayloadError(ValidationError):
    """Raised when a request body cannot be decoded into a plant."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(["The request payload could not be parsed into a Plant"])


class NotFoundError(PlantError):
    """Raised when no plant has the requested id."""

    def __init__(self, plant_id: int):
        self.plant_id = plant_id
        super().__init__(f"specified record was not found (id: {plant_id})")


class ConflictError(PlantError):
    """Raised when a write would violate a uniqueness constraint."""

    def __init__(self, key: str, value):
        self.key = key
        self.value = value
        super().__init__(
            "the request conflicts with the target resource "
            f"(conflicting key: {key}, conflicting value: {value})"
        )


class StorageError(PlantError):
    """Raised for any other backend failure. The original error is chained as __cause__."""


__all__ = [
    "PlantError",
    "ValidationError",
    "PayloadError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
