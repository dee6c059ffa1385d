"""Service layer used by CLI and API frontends."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from shellyprofiles.core.detect import Detector
from shellyprofiles.core.device_match import (
    capability_request,
    component_request,
    find_similar,
    infer_capabilities_from_app,
    match_capabilities,
    match_components,
)
from shellyprofiles.core.errors import ProfileNotFoundError
from shellyprofiles.core.model import (
    Capabilities,
    DetectionResult,
    FormFactor,
    Generation,
    PowerSource,
    Profile,
    Series,
)
from shellyprofiles.core.profile_loader import build_default_registry
from shellyprofiles.core.registry import Registry


def _sorted(profiles: Iterable[Profile]) -> list[Profile]:
    return sorted(profiles, key=lambda p: (p.generation, p.model))


class ProfileService:
    def __init__(self, *, registry: Registry | None = None, include_user: bool = True) -> None:
        if registry is None:
            loaded = build_default_registry(include_user=include_user)
            self.registry = loaded.registry
            self.load_warnings = loaded.warnings
        else:
            self.registry = registry
            self.load_warnings = ()
        self.detector = Detector(self.registry)

    def list_profiles(
        self,
        *,
        generation: Generation | None = None,
        series: Series | None = None,
        form_factor: FormFactor | None = None,
        power_source: PowerSource | None = None,
    ) -> list[Profile]:
        profiles = self.registry.list()
        if generation is not None:
            profiles = [p for p in profiles if p.generation == generation]
        if series is not None:
            profiles = [p for p in profiles if p.series == series]
        if form_factor is not None:
            profiles = [p for p in profiles if p.form_factor == form_factor]
        if power_source is not None:
            profiles = [p for p in profiles if p.power_source == power_source]
        return _sorted(profiles)

    def show(self, model: str) -> Profile:
        profile = self.registry.get(model)
        if profile is None:
            raise ProfileNotFoundError(
                f"Unknown model '{model}'. Use 'shellyprofiles search' to look it up."
            )
        return profile

    def search(self, query: str) -> list[Profile]:
        return _sorted(self.registry.search(query))

    def detect_json(self, data: bytes | str) -> DetectionResult:
        return self.detector.from_json(data)

    def detect_model(self, model: str) -> DetectionResult:
        return self.detector.from_model(model)

    def match(
        self,
        capabilities: Iterable[str] = (),
        minimum_components: Mapping[str, int | bool] | None = None,
    ) -> list[Profile]:
        profiles = match_capabilities(self.registry.list(), capability_request(capabilities))
        if minimum_components:
            profiles = match_components(profiles, component_request(minimum_components))
        return _sorted(profiles)

    def similar(self, model: str) -> list[Profile]:
        similar = find_similar(self.registry, model)
        if similar is None:
            raise ProfileNotFoundError(f"Unknown model '{model}'.")
        return _sorted(similar)

    def infer_capabilities(self, app: str) -> Capabilities:
        return infer_capabilities_from_app(app)
