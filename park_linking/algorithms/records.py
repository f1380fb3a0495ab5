"""
Park Linking — Record Types

Immutable views over park records from the two catalogs.  Raw exports
arrive as dicts with catalog-specific keys (NPS uses ``full_name``,
Wikidata uses ``label``); ``from_dict`` maps them onto one shape and keeps
every other key as pass-through metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .geo_proximity import Coordinate, coerce_coordinate


_NAME_KEYS = ("name", "full_name", "label")
_LAT_KEYS = ("latitude", "lat")
_LON_KEYS = ("longitude", "lng", "lon")
_EXTERNAL_ID_KEYS = ("wikidata_id", "external_id")


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _record_id(data: Mapping[str, Any]) -> str:
    raw = data.get("id")
    if raw is None or not str(raw).strip():
        raise ValueError("record has no id")
    return str(raw)


def _metadata(data: Mapping[str, Any], consumed: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in consumed}


@dataclass(frozen=True)
class PlaceRecord:
    """A named place with an optional location."""

    id: str
    name: str
    location: Coordinate | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        # Locations built by hand skip coerce_coordinate; unusable ones become None.
        if self.location is not None:
            object.__setattr__(
                self,
                "location",
                coerce_coordinate(
                    getattr(self.location, "latitude", None),
                    getattr(self.location, "longitude", None),
                ),
            )

    @property
    def has_location(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class SourceRecord(PlaceRecord):
    """A park from the authoritative catalog."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SourceRecord":
        name = _first_present(data, _NAME_KEYS)
        return cls(
            id=_record_id(data),
            name="" if name is None else str(name),
            location=coerce_coordinate(
                _first_present(data, _LAT_KEYS),
                _first_present(data, _LON_KEYS),
            ),
            metadata=_metadata(data, ("id",) + _NAME_KEYS + _LAT_KEYS + _LON_KEYS),
        )


@dataclass(frozen=True)
class CandidateRecord(PlaceRecord):
    """A park from the secondary catalog, carrying its own identifier."""

    external_id: str | None = None

    @property
    def assignment_key(self) -> str:
        """Key identifying this candidate when claims must be exclusive."""
        return self.external_id or self.id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CandidateRecord":
        name = _first_present(data, _NAME_KEYS)
        external_id = _first_present(data, _EXTERNAL_ID_KEYS)
        return cls(
            id=_record_id(data),
            name="" if name is None else str(name),
            location=coerce_coordinate(
                _first_present(data, _LAT_KEYS),
                _first_present(data, _LON_KEYS),
            ),
            metadata=_metadata(
                data,
                ("id",) + _NAME_KEYS + _LAT_KEYS + _LON_KEYS + _EXTERNAL_ID_KEYS,
            ),
            external_id=None if external_id is None else str(external_id),
        )


def as_source_record(obj: SourceRecord | Mapping[str, Any]) -> SourceRecord:
    if isinstance(obj, SourceRecord):
        return obj
    if isinstance(obj, Mapping):
        return SourceRecord.from_dict(obj)
    raise TypeError(f"cannot build a source record from {type(obj).__name__}")


def as_candidate_record(obj: CandidateRecord | Mapping[str, Any]) -> CandidateRecord:
    if isinstance(obj, CandidateRecord):
        return obj
    if isinstance(obj, Mapping):
        return CandidateRecord.from_dict(obj)
    raise TypeError(f"cannot build a candidate record from {type(obj).__name__}")
