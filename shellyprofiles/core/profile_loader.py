"""Catalog loading and validation for the YAML device catalogs."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from shellyprofiles.core.errors import CatalogLoadError, CatalogValidationError
from shellyprofiles.core.model import (
    Capabilities,
    Components,
    FormFactor,
    Generation,
    Limits,
    PowerSource,
    Profile,
    Protocols,
    SensorType,
    Series,
)
from shellyprofiles.core.registry import Registry

LOGGER = logging.getLogger(__name__)

# Registration order of the bundled families.
CATALOG_FAMILIES: tuple[str, ...] = ("gen1", "gen2", "gen3", "gen4", "blu", "wave")

_FLOAT_LIMITS = frozenset(f.name for f in fields(Limits) if f.type == "float")


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise CatalogValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedCatalog:
    registry: Registry
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("shellyprofiles.schemas").joinpath("catalog.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _catalog_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "shellyprofiles/catalogs", xdg_data / "shellyprofiles/catalogs"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Could not read catalog file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise CatalogValidationError(f"Catalog file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path | Traversable) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise CatalogValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def _required(entry: dict[str, Any], defaults: dict[str, Any], key: str, source: Path | Traversable) -> Any:
    value = entry.get(key, defaults.get(key))
    if value is None:
        raise CatalogValidationError(
            f"Profile '{entry['model']}' in {source} has no {key} and the family sets no default"
        )
    return value


def _limits(defaults: dict[str, Any], entry: dict[str, Any]) -> Limits:
    merged = {**defaults.get("limits", {}), **entry.get("limits", {})}
    return Limits(**{key: float(value) if key in _FLOAT_LIMITS else value for key, value in merged.items()})


def _build_profile(entry: dict[str, Any], defaults: dict[str, Any], source: Path | Traversable) -> Profile:
    capabilities = set(defaults.get("capabilities", ())) | set(entry.get("capabilities", ()))
    protocols = set(defaults.get("protocols", ())) | set(entry.get("protocols", ()))
    return Profile(
        model=entry["model"],
        name=entry["name"],
        app=entry.get("app", ""),
        generation=Generation(_required(entry, defaults, "generation", source)),
        series=Series(_required(entry, defaults, "series", source)),
        form_factor=FormFactor(_required(entry, defaults, "form_factor", source)),
        power_source=PowerSource(_required(entry, defaults, "power_source", source)),
        components=Components(**entry.get("components", {})),
        capabilities=Capabilities(**{name: True for name in capabilities}),
        protocols=Protocols(**{name: True for name in protocols}),
        limits=_limits(defaults, entry),
        sensors=tuple(SensorType(s) for s in entry.get("sensors", ())),
    )


def _build_catalog(doc: dict[str, Any], source: Path | Traversable) -> list[Profile]:
    _validate(doc, source)
    defaults = doc.get("defaults", {})
    profiles: list[Profile] = []
    seen: set[str] = set()
    seen_apps: set[str] = set()
    for entry in doc["profiles"]:
        if entry["model"] in seen:
            raise CatalogValidationError(f"Duplicate model '{entry['model']}' in {source}")
        seen.add(entry["model"])
        app = entry.get("app")
        if app:
            if app in seen_apps:
                raise CatalogValidationError(f"Duplicate app '{app}' in {source}")
            seen_apps.add(app)
        profiles.append(_build_profile(entry, defaults, source))
    return profiles


def _packaged_catalog_path(family: str) -> Traversable:
    if family not in CATALOG_FAMILIES:
        available = ", ".join(CATALOG_FAMILIES)
        raise CatalogLoadError(f"Unknown catalog family '{family}'. Available: {available}")
    return resources.files("shellyprofiles.catalogs").joinpath(f"{family}.yaml")


def load_family(family: str) -> list[Profile]:
    """Parse and validate one bundled family without registering it."""
    path = _packaged_catalog_path(family)
    doc = _read_yaml(path)
    if doc.get("family") != family:
        raise CatalogValidationError(
            f"Catalog file {path} declares family '{doc.get('family')}', expected '{family}'"
        )
    return _build_catalog(doc, path)


def register_family(registry: Registry, family: str) -> list[Profile]:
    profiles = load_family(family)
    registry.register_all(profiles)
    LOGGER.debug("Registered %d %s profiles", len(profiles), family)
    return profiles


def load_catalog_file(path: Path) -> list[Profile]:
    """Parse and validate a catalog file from disk."""
    return _build_catalog(_read_yaml(path), path)


def _iter_user_catalog_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _catalog_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def build_default_registry(include_user: bool = True) -> LoadedCatalog:
    registry = Registry()
    warnings: list[str] = []

    for family in CATALOG_FAMILIES:
        profiles = load_family(family)
        for profile in profiles:
            if registry.exists(profile.model):
                raise CatalogValidationError(
                    f"Model '{profile.model}' from family '{family}' is already defined by another bundled catalog"
                )
            holder = registry.get_by_app(profile.app)
            if holder is not None:
                raise CatalogValidationError(
                    f"App '{profile.app}' of model '{profile.model}' from family '{family}' "
                    f"is already used by model '{holder.model}'"
                )
        registry.register_all(profiles)

    if include_user:
        for path in _iter_user_catalog_paths():
            profiles = load_catalog_file(path)
            for profile in profiles:
                if registry.exists(profile.model):
                    warning = f"User profile '{profile.model}' from {path} overrides existing profile"
                    LOGGER.warning(warning)
                    warnings.append(warning)
                holder = registry.get_by_app(profile.app)
                if holder is not None and holder.model != profile.model:
                    warning = (
                        f"User profile '{profile.model}' from {path} takes over app "
                        f"'{profile.app}' from model '{holder.model}'"
                    )
                    LOGGER.warning(warning)
                    warnings.append(warning)
            registry.register_all(profiles)

    return LoadedCatalog(registry=registry, warnings=tuple(warnings))
