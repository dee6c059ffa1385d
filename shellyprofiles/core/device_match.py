"""Catalog matching: capability supersets, component thresholds, similarity."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import fields

from shellyprofiles.core.errors import ProfileQueryError
from shellyprofiles.core.model import Capabilities, Components, Profile
from shellyprofiles.core.registry import Registry, resolve_capability

_COMPONENT_FIELDS = {f.name for f in fields(Components)}


def _has_capabilities(profile: Profile, required: Capabilities) -> bool:
    return all(getattr(profile.capabilities, name) for name in required.enabled())


def _has_components(profile: Profile, minimum: Components) -> bool:
    for f in fields(Components):
        wanted = getattr(minimum, f.name)
        if not wanted:
            continue
        have = getattr(profile.components, f.name)
        if isinstance(wanted, bool):
            if not have:
                return False
        elif have < wanted:
            return False
    return True


def match_capabilities(profiles: Iterable[Profile], required: Capabilities) -> list[Profile]:
    """Profiles whose capabilities are a superset of the flags set in ``required``."""
    return [p for p in profiles if _has_capabilities(p, required)]


def match_components(profiles: Iterable[Profile], minimum: Components) -> list[Profile]:
    """Profiles with at least ``minimum`` of every non-zero component field."""
    return [p for p in profiles if _has_components(p, minimum)]


def find_similar(registry: Registry, model: str) -> list[Profile] | None:
    """Other profiles sharing generation, series and form factor with ``model``.

    Returns ``None`` when ``model`` is not registered, and an empty list when it
    is registered but nothing else is alike.
    """
    profile = registry.get(model)
    if profile is None:
        return None
    return [
        p
        for p in registry.list_by_generation(profile.generation)
        if p.model != profile.model
        and p.series == profile.series
        and p.form_factor == profile.form_factor
    ]


def infer_capabilities_from_app(app: str) -> Capabilities:
    """Best-effort capability guess from a firmware app name.

    Only for apps with no catalog entry at all. The result is incomplete and
    must never replace a registered profile's capabilities.
    """
    name = app.lower()
    metering = "pm" in name or "em" in name
    return Capabilities(
        power_metering=metering,
        energy_metering=metering,
        cover_support=any(token in name for token in ("2pm", "cover", "shutter", "roller")),
        dimming_support=any(token in name for token in ("dimmer", "rgbw", "bulb", "duo")),
        color_support=any(token in name for token in ("rgb", "bulb", "color")),
        three_phase="3em" in name,
    )


def capability_request(names: Iterable[str]) -> Capabilities:
    flags: dict[str, bool] = {}
    unknown: list[str] = []
    for name in names:
        attr = resolve_capability(name)
        if attr is None:
            unknown.append(name)
        else:
            flags[attr] = True
    if unknown:
        raise ProfileQueryError(f"Unknown capability name(s): {', '.join(unknown)}")
    return Capabilities(**flags)


def component_request(counts: Mapping[str, int | bool]) -> Components:
    unknown = sorted(set(counts) - _COMPONENT_FIELDS)
    if unknown:
        available = ", ".join(sorted(_COMPONENT_FIELDS))
        raise ProfileQueryError(
            f"Unknown component field(s): {', '.join(unknown)}. Available: {available}"
        )
    return Components(**counts)
