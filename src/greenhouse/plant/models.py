from dataclasses import dataclass, field, replace
from typing import Any, Optional

from greenhouse.plant.errors import PayloadError

REQUIRED_FIELDS = ("name", "light", "humidity", "water")


@dataclass
class Plant:
    """A stored plant. `id` is assigned by the store."""

    name: str
    light: str
    humidity: str
    water: str
    other_names: list[str] = field(default_factory=list)
    id: Optional[int] = None

    def with_id(self, plant_id: int) -> "Plant":
        return replace(self, id=plant_id, other_names=list(self.other_names))

    def to_document(self) -> dict:
        """The stored document. The id lives beside it, not inside it."""
        return {
            "name": self.name,
            "otherNames": list(self.other_names),
            "light": self.light,
            "humidity": self.humidity,
            "water": self.water,
        }

    def to_dict(self) -> dict:
        """JSON representation, as returned by the API."""
        return {"id": self.id, **self.to_document()}

    @classmethod
    def from_document(cls, plant_id: int, doc: dict) -> "Plant":
        return cls(
            id=plant_id,
            name=doc["name"],
            other_names=list(doc.get("otherNames") or []),
            light=doc["light"],
            humidity=doc["humidity"],
            water=doc["water"],
        )

    def __str__(self) -> str:
        return (
            f"Id: {self.id}, Name: {self.name}, OtherNames: [{', '.join(self.other_names)}], "
            f"Light: {self.light}, Humidity: {self.humidity}, Water: {self.water}"
        )


@dataclass
class PlantRequest:
    """Decoded body of a create or update request."""

    name: str = ""
    other_names: list[str] = field(default_factory=list)
    light: str = ""
    humidity: str = ""
    water: str = ""

    @classmethod
    def from_json(cls, payload: Any) -> "PlantRequest":
        """
        Decode a parsed JSON body.

        Absent (or null) fields take their defaults. Anything that is not an
        object, or a field of the wrong type, raises PayloadError.
        """
        if not isinstance(payload, dict):
            raise PayloadError(f"expected a JSON object, got {type(payload).__name__}")

        values = {}
        for key in REQUIRED_FIELDS:
            value = payload.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise PayloadError(f"{key} must be a string")
            values[key] = value

        other_names = payload.get("otherNames")
        if other_names is not None:
            if not isinstance(other_names, list) or not all(isinstance(n, str) for n in other_names):
                raise PayloadError("otherNames must be a list of strings")
            values["other_names"] = list(other_names)

        return cls(**values)

    def validate(self, require_name: bool = True) -> list[str]:
        """Return every violation; an empty list means the request is valid."""
        results = []
        for key in REQUIRED_FIELDS:
            if key == "name" and not require_name:
                continue
            if not getattr(self, key):
                results.append(f"The {key} value is required")
        return results

    def to_plant(self, plant_id: Optional[int] = None) -> Plant:
        return Plant(
            id=plant_id,
            name=self.name,
            other_names=list(self.other_names),
            light=self.light,
            humidity=self.humidity,
            water=self.water,
        )
