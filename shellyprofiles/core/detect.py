"""Resolve device identification payloads to catalog profiles."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from shellyprofiles.core.model import DetectionResult, DeviceInfo, Gen1Status, Generation
from shellyprofiles.core.registry import Registry

LOGGER = logging.getLogger(__name__)

# First match wins; checked against the upper-cased model string.
_GENERATION_PREFIXES: tuple[tuple[str, Generation], ...] = (
    ("S4", Generation.GEN4),
    ("S3", Generation.GEN3),
    ("SN", Generation.GEN2),
    ("SH", Generation.GEN1),
)

_NO_MATCH = DetectionResult(generation=Generation.UNKNOWN)


def detect_generation(model: str) -> Generation:
    """Guess the generation from vendor SKU conventions.

    This is a heuristic: unrecognised prefixes give ``Generation.UNKNOWN``.
    """
    if not isinstance(model, str):
        return Generation.UNKNOWN
    upper = model.upper()
    for prefix, generation in _GENERATION_PREFIXES:
        if upper.startswith(prefix):
            return generation
    return Generation.UNKNOWN


class Detector:
    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def from_device_info(self, info: DeviceInfo) -> DetectionResult:
        # The payload's explicit gen field wins over prefix inference.
        # Only RPC generations are valid in this shape.
        generation = Generation.from_number(info.gen)
        if not generation.is_rpc:
            generation = Generation.UNKNOWN
        profile = self.registry.get(info.model)
        if profile is None:
            profile = self.registry.get_by_app(info.app)
            if profile is not None:
                LOGGER.debug("Model %r not registered, matched app %r", info.model, info.app)
        return DetectionResult(
            generation=generation,
            model=info.model,
            app=info.app,
            profile=profile,
        )

    def from_gen1_status(self, status: Gen1Status) -> DetectionResult:
        return DetectionResult(
            generation=Generation.GEN1,
            model=status.type,
            profile=self.registry.get(status.type),
        )

    def from_model(self, model: str) -> DetectionResult:
        return DetectionResult(
            generation=detect_generation(model),
            model=model,
            profile=self.registry.get(model),
        )

    def from_payload(self, payload: Any) -> DetectionResult:
        if not isinstance(payload, Mapping):
            LOGGER.debug("Identification payload is not an object: %s", type(payload).__name__)
            return _NO_MATCH

        info = DeviceInfo.from_dict(payload)
        if info.model or info.app:
            return self.from_device_info(info)

        status = Gen1Status.from_dict(payload)
        if status.type:
            return self.from_gen1_status(status)

        LOGGER.debug("Identification payload has no model, app or type field")
        return _NO_MATCH

    def from_json(self, data: bytes | str) -> DetectionResult:
        """Detect from a raw ``/shelly`` response body of unknown generation.

        Malformed input is reported as a non-match rather than raised.
        """
        try:
            payload = json.loads(data)
        except (ValueError, TypeError, RecursionError) as exc:
            LOGGER.debug("Could not decode identification payload: %s", exc)
            return _NO_MATCH
        return self.from_payload(payload)
