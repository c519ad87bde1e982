import threading
from abc import ABC, abstractmethod
from typing import List

from greenhouse.plant.errors import ConflictError, NotFoundError
from greenhouse.plant.models import Plant


class PlantStore(ABC):
    """
    Persistence contract for plants.

    Implementations classify every failure into NotFoundError,
    ConflictError or StorageError and raise it to the caller. They do not
    retry and do not log errors.
    """

    @abstractmethod
    def list_all(self) -> List[Plant]:
        """Return every stored plant; an empty list when there are none."""

    @abstractmethod
    def get_by_id(self, plant_id: int) -> Plant:
        """
        Return the plant with the given id.

        Raises:
            NotFoundError: no plant has that id
            StorageError: the backend failed
        """

    @abstractmethod
    def create(self, plant: Plant) -> int:
        """
        Assign the next id to the plant, insert it and return the id.

        Ids increase monotonically and are never reused, even after a delete.
        Any id already set on the plant is ignored.

        Raises:
            ConflictError: a plant with the same name exists (key "name")
            StorageError: the backend failed
        """

    @abstractmethod
    def upsert(self, plant_id: int, plant: Plant) -> None:
        """
        Replace the plant with the given id in full, or insert it with exactly
        that id when absent. Repeating the call yields the same state.

        Raises:
            ConflictError: a different plant already has the name
            StorageError: the backend failed
        """

    @abstractmethod
    def delete_by_id(self, plant_id: int) -> None:
        """Delete the plant with the given id. Deleting an absent id is a no-op."""

    def close(self) -> None:
        """Release backend resources."""


class InMemoryPlantStore(PlantStore):
    """
    PlantStore backed by a dict, for tests and local experiments.

    Plants are copied on the way in and out so callers cannot mutate stored
    state. Seed plants keep their ids; seed plants without one are created
    after them and get the next free ids.
    """

    def __init__(self, plants: List[Plant] = None):
        self._lock = threading.Lock()
        self._plants: dict[int, Plant] = {}
        self._last_id = 0
        plants = plants or []
        for plant in plants:
            if plant.id is not None:
                self.upsert(plant.id, plant)
        for plant in plants:
            if plant.id is None:
                self.create(plant)

    def list_all(self) -> List[Plant]:
        with self._lock:
            return [self._plants[i].with_id(i) for i in sorted(self._plants)]

    def get_by_id(self, plant_id: int) -> Plant:
        with self._lock:
            plant = self._plants.get(plant_id)
            if plant is None:
                raise NotFoundError(plant_id)
            return plant.with_id(plant_id)

    def create(self, plant: Plant) -> int:
        with self._lock:
            self._check_name(plant.name, plant_id=None)
            self._last_id += 1
            self._plants[self._last_id] = plant.with_id(self._last_id)
            return self._last_id

    def upsert(self, plant_id: int, plant: Plant) -> None:
        with self._lock:
            self._check_name(plant.name, plant_id=plant_id)
            self._plants[plant_id] = plant.with_id(plant_id)
            self._last_id = max(self._last_id, plant_id)

    def delete_by_id(self, plant_id: int) -> None:
        with self._lock:
            self._plants.pop(plant_id, None)

    def _check_name(self, name: str, plant_id) -> None:
        for existing_id, existing in self._plants.items():
            if existing.name == name and existing_id != plant_id:
                raise ConflictError("name", name)
