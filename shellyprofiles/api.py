"""Stable public API for building tooling on top of shellyprofiles.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from shellyprofiles.core.detect import Detector, detect_generation
from shellyprofiles.core.device_match import (
    find_similar,
    infer_capabilities_from_app,
    match_capabilities,
    match_components,
)
from shellyprofiles.core.errors import (
    CatalogLoadError,
    CatalogValidationError,
    ProfileNotFoundError,
    ProfileQueryError,
    ShellyProfilesError,
)
from shellyprofiles.core.model import (
    Capabilities,
    Components,
    ComponentType,
    DetectionResult,
    DeviceInfo,
    FormFactor,
    Gen1Status,
    Generation,
    Limits,
    PowerSource,
    Profile,
    Protocols,
    SensorType,
    Series,
)
from shellyprofiles.core.profile_loader import CATALOG_FAMILIES, build_default_registry, register_family
from shellyprofiles.core.registry import Registry
from shellyprofiles.core.service import ProfileService

__all__ = [
    "ShellyProfilesError",
    "ProfileNotFoundError",
    "ProfileQueryError",
    "CatalogLoadError",
    "CatalogValidationError",
    "Capabilities",
    "Components",
    "ComponentType",
    "DetectionResult",
    "DeviceInfo",
    "FormFactor",
    "Gen1Status",
    "Generation",
    "Limits",
    "PowerSource",
    "Profile",
    "Protocols",
    "SensorType",
    "Series",
    "Registry",
    "Detector",
    "CATALOG_FAMILIES",
    "build_default_registry",
    "register_family",
    "detect_generation",
    "find_similar",
    "infer_capabilities_from_app",
    "match_capabilities",
    "match_components",
    "ProfileSummary",
    "Client",
]


@dataclass(frozen=True)
class ProfileSummary:
    """Flat view of a profile for listings and table output."""

    model: str
    name: str
    app: str
    generation: Generation
    series: Series
    form_factor: FormFactor

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileSummary:
        return cls(
            model=profile.model,
            name=profile.name,
            app=profile.app,
            generation=profile.generation,
            series=profile.series,
            form_factor=profile.form_factor,
        )


class Client:
    """Public client for querying the Shelly device catalog.

    A `Client` wraps catalog loading, detection, and matching behind a stable
    API intended for third-party tools (integrations, services, scripts).
    Pass ``registry`` to query a catalog you populated yourself.
    """

    def __init__(self, *, registry: Registry | None = None, include_user: bool = True) -> None:
        self._service = ProfileService(registry=registry, include_user=include_user)

    @property
    def registry(self) -> Registry:
        return self._service.registry

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(
        self,
        *,
        generation: Generation | None = None,
        series: Series | None = None,
        form_factor: FormFactor | None = None,
        power_source: PowerSource | None = None,
    ) -> list[Profile]:
        return self._service.list_profiles(
            generation=generation,
            series=series,
            form_factor=form_factor,
            power_source=power_source,
        )

    def list_summaries(self) -> list[ProfileSummary]:
        return [ProfileSummary.from_profile(p) for p in self._service.list_profiles()]

    def get_profile(self, model: str) -> Profile:
        return self._service.show(model)

    def search(self, query: str) -> list[Profile]:
        return self._service.search(query)

    def detect(self, data: bytes | str) -> DetectionResult:
        return self._service.detect_json(data)

    def detect_model(self, model: str) -> DetectionResult:
        return self._service.detect_model(model)

    def match(
        self,
        *,
        capabilities: Iterable[str] = (),
        minimum_components: Mapping[str, int | bool] | None = None,
    ) -> list[Profile]:
        return self._service.match(capabilities, minimum_components)

    def similar(self, model: str) -> list[Profile]:
        return self._service.similar(model)

    def infer_capabilities(self, app: str) -> Capabilities:
        return self._service.infer_capabilities(app)
