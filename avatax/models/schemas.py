from typing import Any, Mapping, Union

from pydantic import BaseModel, field_validator


class Coordinates(BaseModel):
    """
    A point for tax estimation. Numeric values are kept as their decimal
    string form so they reach the URL exactly as given.
    """
    latitude: str
    longitude: str

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_to_string(cls, value: Any) -> str:
        if value is None:
            raise ValueError("coordinate is required")
        return str(value).strip()

    @classmethod
    def coerce(cls, value: Union["Coordinates", Mapping[str, Any]]) -> "Coordinates":
        """Accept a model or any mapping with latitude/longitude keys."""
        if isinstance(value, cls):
            return value
        return cls(latitude=value["latitude"], longitude=value["longitude"])

    def as_path(self) -> str:
        return f"{self.latitude},{self.longitude}"
