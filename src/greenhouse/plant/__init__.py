"""
Plant

This module provides the plant model, the PlantStore persistence contract
and its implementations.
"""

from greenhouse.plant.errors import (
    ConflictError,
    NotFoundError,
    PayloadError,
    PlantError,
    StorageError,
    ValidationError,
)
from greenhouse.plant.models import Plant, PlantRequest
from greenhouse.plant.repository import PlantRepository
from greenhouse.plant.store import InMemoryPlantStore, PlantStore

__all__ = [
    "Plant",
    "PlantRequest",
    "PlantStore",
    "InMemoryPlantStore",
    "PlantRepository",
    "PlantError",
    "ValidationError",
    "PayloadError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
