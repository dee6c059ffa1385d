from __future__ import annotations

import pytest

from shellyprofiles.core.device_match import (
    capability_request,
    component_request,
    find_similar,
    infer_capabilities_from_app,
    match_capabilities,
    match_components,
)
from shellyprofiles.core.errors import ProfileQueryError
from shellyprofiles.core.model import (
    Capabilities,
    Components,
    FormFactor,
    Generation,
    PowerSource,
    Profile,
    Series,
)
from shellyprofiles.core.registry import Registry


def _profile(model: str, **overrides) -> Profile:
    fields = dict(
        model=model,
        name=model,
        generation=Generation.GEN2,
        series=Series.PLUS,
        form_factor=FormFactor.FLUSH,
        power_source=PowerSource.MAINS,
    )
    fields.update(overrides)
    return Profile(**fields)


def test_capability_matching_is_superset() -> None:
    a = _profile("A", capabilities=Capabilities(power_metering=True))
    b = _profile("B", capabilities=Capabilities(power_metering=True, cover_support=True))
    assert match_capabilities([a, b], Capabilities(power_metering=True)) == [a, b]
    assert match_capabilities([a, b], Capabilities(power_metering=True, cover_support=True)) == [b]


def test_empty_capability_request_matches_everything() -> None:
    profiles = [_profile("A"), _profile("B", capabilities=Capabilities(kvs=True))]
    assert match_capabilities(profiles, Capabilities()) == profiles


def test_component_matching_is_threshold() -> None:
    c = _profile("C", components=Components(switches=2))
    d = _profile("D", components=Components(switches=4))
    assert match_components([c, d], Components(switches=2)) == [c, d]
    assert match_components([c, d], Components(switches=4)) == [d]
    assert match_components([c, d], Components(switches=10)) == []


def test_component_flags_only_required_when_requested() -> None:
    display = _profile("WD", components=Components(switches=2, display=True))
    relay = _profile("R", components=Components(switches=2))
    assert match_components([display, relay], Components(display=True)) == [display]
    assert match_components([display, relay], Components(switches=1)) == [display, relay]


def test_similarity_requires_generation_series_and_form_factor() -> None:
    plus = _profile("PLUS-FLUSH", series=Series.PLUS)
    mini = _profile("MINI-FLUSH", series=Series.MINI)
    wave = _profile("WAVE-FLUSH", series=Series.WAVE)
    plus_twin = _profile("PLUS-FLUSH-2", series=Series.PLUS)
    plus_plug = _profile("PLUS-PLUG", form_factor=FormFactor.PLUG)
    gen3_flush = _profile("G3-FLUSH", generation=Generation.GEN3)
    registry = Registry([plus, mini, wave, plus_twin, plus_plug, gen3_flush])

    assert find_similar(registry, "PLUS-FLUSH") == [plus_twin]
    assert find_similar(registry, "PLUS-FLUSH-2") == [plus]
    assert find_similar(registry, "MINI-FLUSH") == []
    assert find_similar(registry, "WAVE-FLUSH") == []


def test_similarity_for_unknown_model_is_none() -> None:
    assert find_similar(Registry([_profile("A")]), "missing") is None


@pytest.mark.parametrize(
    ("app", "expected"),
    [
        ("Plus1PM", {"power_metering", "energy_metering"}),
        ("Plus2PM", {"power_metering", "energy_metering", "cover_support"}),
        ("ShutterG3", {"cover_support"}),
        ("PlusRGBWPM", {"power_metering", "energy_metering", "dimming_support", "color_support"}),
        ("Pro3EM", {"power_metering", "energy_metering", "three_phase"}),
        ("Plus1", set()),
        ("", set()),
    ],
)
def test_infer_capabilities_from_app(app: str, expected: set[str]) -> None:
    assert set(infer_capabilities_from_app(app).enabled()) == expected


def test_capability_request_resolves_aliases() -> None:
    assert capability_request(["PowerMetering", "cover"]) == Capabilities(
        power_metering=True, cover_support=True
    )
    with pytest.raises(ProfileQueryError, match="teleport"):
        capability_request(["scripting", "teleport"])


def test_component_request_validates_field_names() -> None:
    assert component_request({"switches": 2, "display": True}) == Components(switches=2, display=True)
    with pytest.raises(ProfileQueryError, match="relays"):
        component_request({"relays": 2})
