"""Weighting profiles: travel mode to cost multiplier tables.

A profile maps the value of one attribute tag (``highway`` by default)
to a strictly positive cost multiplier. Edge weight is
``length * multiplier``. Classes listed in ``excluded`` (or unlisted
classes when the profile has no ``default_factor``) are not routable
under that profile and never become edges.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.errors import ConfigurationError, UnknownProfileError

logger = logging.getLogger(__name__)

ONEWAY_FORWARD = frozenset({"yes", "true", "1"})
ONEWAY_REVERSE = frozenset({"-1", "reverse"})


class WeightProfile(BaseModel):
    """Cost table for one travel mode."""

    model_config = ConfigDict(frozen=True)

    name: str
    tag_key: str = "highway"
    cost_factors: Dict[str, float] = Field(default_factory=dict)
    excluded: FrozenSet[str] = frozenset()
    default_factor: Optional[float] = None
    respect_oneway: bool = True

    @field_validator("cost_factors")
    @classmethod
    def _factors_positive(cls, value: Dict[str, float]) -> Dict[str, float]:
        for key, factor in value.items():
            if not math.isfinite(factor) or factor <= 0:
                raise ValueError(
                    f"cost factor for {key!r} must be finite and > 0, got {factor}"
                )
        return value

    @field_validator("default_factor")
    @classmethod
    def _default_positive(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and (not math.isfinite(value) or value <= 0):
            raise ValueError(f"default_factor must be finite and > 0, got {value}")
        return value

    def cost_factor(self, tags: Mapping[str, str]) -> Optional[float]:
        """Return the multiplier for an edge's tags, or None if excluded."""
        road_class = tags.get(self.tag_key, "")
        if road_class in self.excluded:
            return None
        factor = self.cost_factors.get(road_class)
        if factor is None:
            return self.default_factor
        return factor

    def directions(self, tags: Mapping[str, str]) -> Tuple[bool, bool]:
        """Return (forward allowed, reverse allowed) for a two-way network."""
        if not self.respect_oneway:
            return True, True
        oneway = tags.get("oneway", "").strip().lower()
        if oneway in ONEWAY_FORWARD:
            return True, False
        if oneway in ONEWAY_REVERSE:
            return False, True
        return True, True


# Values are multipliers on length: 1.0 is the preferred class, larger
# values make a class proportionally more expensive to traverse.
DEFAULT_PROFILES: Tuple[WeightProfile, ...] = (
    WeightProfile(
        name="foot",
        cost_factors={
            "pedestrian": 1.0,
            "footway": 1.0,
            "path": 1.0,
            "steps": 1.25,
            "living_street": 1.0,
            "residential": 1.1,
            "service": 1.1,
            "unclassified": 1.15,
            "track": 1.2,
            "cycleway": 1.25,
            "tertiary": 1.25,
            "secondary": 1.4,
            "primary": 1.6,
            "trunk": 2.5,
        },
        excluded=frozenset({"motorway", "motorway_link"}),
        respect_oneway=False,
    ),
    WeightProfile(
        name="bicycle",
        cost_factors={
            "cycleway": 1.0,
            "living_street": 1.05,
            "residential": 1.1,
            "service": 1.2,
            "unclassified": 1.2,
            "track": 1.4,
            "path": 1.3,
            "tertiary": 1.25,
            "secondary": 1.4,
            "primary": 1.7,
            "trunk": 3.0,
            "pedestrian": 2.0,
            "footway": 2.5,
        },
        excluded=frozenset({"motorway", "motorway_link", "steps"}),
        respect_oneway=True,
    ),
    WeightProfile(
        name="car",
        cost_factors={
            "motorway": 1.0,
            "motorway_link": 1.2,
            "trunk": 1.1,
            "primary": 1.2,
            "secondary": 1.35,
            "tertiary": 1.5,
            "unclassified": 1.8,
            "residential": 2.0,
            "living_street": 4.0,
            "service": 3.0,
        },
        excluded=frozenset(
            {"footway", "path", "pedestrian", "steps", "cycleway", "track"}
        ),
        respect_oneway=True,
    ),
)


class ProfileRegistry:
    """Named weighting profiles, validated on registration."""

    def __init__(self, profiles: Iterable[WeightProfile] = DEFAULT_PROFILES) -> None:
        self._profiles: Dict[str, WeightProfile] = {}
        for profile in profiles:
            self.register(profile)

    def register(self, profile: WeightProfile) -> None:
        self._profiles[profile.name] = profile

    def get(self, name: str) -> WeightProfile:
        """Look up a profile by name.

        Raises:
            UnknownProfileError: If no profile with that name is registered.
        """
        try:
            return self._profiles[name]
        except KeyError:
            raise UnknownProfileError(
                f"Unknown profile: {name!r}",
                profile=name,
                available=self.names,
            ) from None

    def resolve(self, profile: Union[str, WeightProfile]) -> WeightProfile:
        if isinstance(profile, WeightProfile):
            return profile
        return self.get(profile)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._profiles))

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def load_file(self, path: Union[str, Path]) -> None:
        """Register every profile found in a JSON file.

        The file holds either a list of profile objects or a mapping of
        name to profile body.

        Raises:
            ConfigurationError: If the file cannot be read or a profile
                table is invalid.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot read profiles file {path}",
                setting_name="profiles_file",
                expected_type="JSON",
                cause=e,
            )

        if isinstance(data, Mapping):
            data = [{"name": name, **body} for name, body in data.items()]

        try:
            profiles = [WeightProfile.model_validate(item) for item in data]
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid profile table in {path}",
                setting_name="profiles_file",
                expected_type="profile table",
                cause=e,
            )

        for profile in profiles:
            self.register(profile)
        logger.info(
            "Profiles loaded",
            extra={"path": str(path), "profiles": [p.name for p in profiles]},
        )
