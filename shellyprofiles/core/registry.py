"""Profile registry indexed by model identifier and firmware application name."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType

from shellyprofiles.core.errors import ProfileNotFoundError
from shellyprofiles.core.model import (
    Capabilities,
    ComponentType,
    FormFactor,
    Generation,
    PowerSource,
    Profile,
    Protocols,
    Series,
)

LOGGER = logging.getLogger(__name__)


def _aliases_for(record_type: type, extra: Mapping[str, str]) -> dict[str, str]:
    aliases: dict[str, str] = {}
    for f in fields(record_type):
        aliases[f.name] = f.name
        aliases[f.name.replace("_", "")] = f.name
    aliases.update(extra)
    return aliases


# alias -> field name on Capabilities / Protocols
CAPABILITY_ALIASES: dict[str, str] = _aliases_for(
    Capabilities,
    {
        "cover": "cover_support",
        "dimming": "dimming_support",
        "color": "color_support",
        "rgb": "color_support",
        "cct": "color_temperature",
        "scripts": "scripting",
        "3phase": "three_phase",
    },
)
PROTOCOL_ALIASES: dict[str, str] = _aliases_for(
    Protocols,
    {
        "ws": "websocket",
        "coap": "coiot",
        "bluetooth": "ble",
        "z-wave": "zwave",
        "eth": "ethernet",
    },
)


def resolve_capability(name: str) -> str | None:
    return CAPABILITY_ALIASES.get(name.strip().lower())


def resolve_protocol(name: str) -> str | None:
    return PROTOCOL_ALIASES.get(name.strip().lower())


@dataclass(frozen=True)
class _Indexes:
    by_model: Mapping[str, Profile]
    by_app: Mapping[str, Profile]


_EMPTY = _Indexes(by_model=MappingProxyType({}), by_app=MappingProxyType({}))


class Registry:
    """Catalog of device profiles.

    Both indices live in a single immutable ``_Indexes`` snapshot. Writers
    build a new snapshot under ``_write_lock`` and swap it in with one
    attribute assignment, so readers never lock and never see a profile in
    one index but not the other.

    An app key belongs to the most recently registered profile that carries
    it. A profile whose app was taken over keeps its ``app`` field, but
    ``get_by_app`` no longer resolves to it; the takeover is logged as a
    warning.
    """

    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._write_lock = threading.Lock()
        self._indexes = _EMPTY
        self.register_all(profiles)

    def register(self, profile: Profile) -> None:
        self.register_all((profile,))

    def register_all(self, profiles: Iterable[Profile]) -> None:
        pending = list(profiles)
        if not pending:
            return
        with self._write_lock:
            by_model = dict(self._indexes.by_model)
            by_app = dict(self._indexes.by_app)
            for profile in pending:
                previous = by_model.get(profile.model)
                if previous is not None:
                    LOGGER.debug("Replacing profile for model %s", profile.model)
                    if previous.app and by_app.get(previous.app) is previous:
                        del by_app[previous.app]
                by_model[profile.model] = profile
                if profile.app:
                    holder = by_app.get(profile.app)
                    if holder is not None and holder.model != profile.model:
                        LOGGER.warning(
                            "App %s moves from model %s to %s",
                            profile.app,
                            holder.model,
                            profile.model,
                        )
                    by_app[profile.app] = profile
            self._indexes = _Indexes(
                by_model=MappingProxyType(by_model),
                by_app=MappingProxyType(by_app),
            )

    def get(self, model: str) -> Profile | None:
        return self._indexes.by_model.get(model)

    def get_by_app(self, app: str) -> Profile | None:
        if not app:
            return None
        return self._indexes.by_app.get(app)

    def must_get(self, model: str) -> Profile:
        """Return the profile for ``model`` or raise ``ProfileNotFoundError``.

        Only for callers that registered ``model`` themselves; live device data
        goes through ``get``.
        """
        profile = self.get(model)
        if profile is None:
            raise ProfileNotFoundError(f"profile not found: {model}")
        return profile

    def exists(self, model: str) -> bool:
        return model in self._indexes.by_model

    def __contains__(self, model: object) -> bool:
        return isinstance(model, str) and self.exists(model)

    def count(self) -> int:
        return len(self._indexes.by_model)

    def __len__(self) -> int:
        return self.count()

    def list(self) -> list[Profile]:
        return list(self._indexes.by_model.values())

    def _filter(self, predicate: Callable[[Profile], bool]) -> list[Profile]:
        return [p for p in self._indexes.by_model.values() if predicate(p)]

    def list_by_generation(self, generation: Generation) -> list[Profile]:
        return self._filter(lambda p: p.generation == generation)

    def list_by_series(self, series: Series) -> list[Profile]:
        return self._filter(lambda p: p.series == series)

    def list_by_form_factor(self, form_factor: FormFactor) -> list[Profile]:
        return self._filter(lambda p: p.form_factor == form_factor)

    def list_by_power_source(self, power_source: PowerSource) -> list[Profile]:
        return self._filter(lambda p: p.power_source == power_source)

    def list_by_capability(self, capability: str) -> list[Profile]:
        attr = resolve_capability(capability)
        if attr is None:
            return []
        return self._filter(lambda p: getattr(p.capabilities, attr))

    def list_by_protocol(self, protocol: str) -> list[Profile]:
        attr = resolve_protocol(protocol)
        if attr is None:
            return []
        return self._filter(lambda p: getattr(p.protocols, attr))

    def list_by_component(self, component_type: ComponentType | str) -> list[Profile]:
        return self._filter(lambda p: p.has_component(component_type))

    def search(self, query: str) -> list[Profile]:
        needle = query.lower()
        return self._filter(
            lambda p: needle in p.model.lower()
            or needle in p.name.lower()
            or needle in p.app.lower()
        )

    def clear(self) -> None:
        """Drop every profile. Meant for resetting state between tests."""
        with self._write_lock:
            self._indexes = _EMPTY
