from __future__ import annotations

import pytest

from shellyprofiles.core.model import (
    DEFAULT_GEN2_CAPABILITIES,
    Capabilities,
    Components,
    ComponentType,
    DetectionResult,
    DeviceInfo,
    FormFactor,
    Gen1Status,
    Generation,
    PowerSource,
    Profile,
    SensorType,
    Series,
)


def _profile(**overrides) -> Profile:
    fields = dict(
        model="SNSW-002P16EU",
        name="Shelly Plus 2PM",
        generation=Generation.GEN2,
        series=Series.PLUS,
        form_factor=FormFactor.FLUSH,
        power_source=PowerSource.MAINS,
        components=Components(switches=2, covers=1, inputs=2, power_meters=2),
        capabilities=Capabilities(power_metering=True, cover_support=True),
        app="Plus2PM",
    )
    fields.update(overrides)
    return Profile(**fields)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1, Generation.GEN1),
        (4, Generation.GEN4),
        (0, Generation.UNKNOWN),
        (99, Generation.UNKNOWN),
        (-2, Generation.UNKNOWN),
        ("2", Generation.UNKNOWN),
        (True, Generation.UNKNOWN),
        (None, Generation.UNKNOWN),
    ],
)
def test_generation_from_number(value, expected) -> None:
    assert Generation.from_number(value) is expected


def test_generation_protocol_family_and_str() -> None:
    assert Generation.GEN1.is_rest and not Generation.GEN1.is_rpc
    assert all(g.is_rpc for g in (Generation.GEN2, Generation.GEN3, Generation.GEN4))
    assert not Generation.UNKNOWN.is_rpc and not Generation.UNKNOWN.is_rest
    assert str(Generation.GEN3) == "Gen3"
    assert str(Generation.UNKNOWN) == "Unknown"


def test_enabled_flags_lists_only_true_fields() -> None:
    assert Capabilities().enabled() == ()
    assert Capabilities(three_phase=True, kvs=True).enabled() == ("kvs", "three_phase")
    assert "scripting" in DEFAULT_GEN2_CAPABILITIES.enabled()


def test_profile_is_immutable() -> None:
    profile = _profile()
    with pytest.raises(AttributeError):
        profile.name = "changed"  # type: ignore[misc]


def test_component_queries() -> None:
    profile = _profile()
    assert profile.has_component(ComponentType.SWITCH)
    assert profile.has_component("cover")
    assert profile.has_component("SWITCH")
    assert profile.component_count(ComponentType.PM1) == 2
    assert profile.component_count("switch") == 2
    assert not profile.has_component(ComponentType.LIGHT)
    assert not profile.has_component(ComponentType.WIFI)
    assert not profile.has_component("no-such-component")
    assert profile.component_count("no-such-component") == 0


def test_cover_presence_follows_capability_without_count() -> None:
    profile = _profile(components=Components(switches=2), capabilities=Capabilities(cover_support=True))
    assert profile.has_component(ComponentType.COVER)
    assert profile.component_count(ComponentType.COVER) == 0


def test_sensor_backed_components() -> None:
    smoke = _profile(
        model="SNSN-0031Z",
        form_factor=FormFactor.SENSOR,
        power_source=PowerSource.BATTERY,
        components=Components(),
        capabilities=Capabilities(),
        sensors=(SensorType.SMOKE, SensorType.TEMPERATURE, SensorType.BATTERY),
    )
    assert smoke.has_component(ComponentType.SMOKE)
    assert smoke.has_component(ComponentType.TEMPERATURE)
    assert not smoke.has_component(ComponentType.HUMIDITY)
    assert smoke.has_sensor(SensorType.BATTERY)
    assert smoke.is_battery_powered


def test_thermostat_is_presence_only() -> None:
    trv = _profile(components=Components(thermostat=True, temperature_sensors=1))
    assert trv.has_component(ComponentType.THERMOSTAT)
    assert trv.component_count(ComponentType.THERMOSTAT) == 0


def test_series_predicates() -> None:
    plus = _profile()
    assert plus.is_gen2_plus and not plus.is_gen2_pro
    assert plus.supports_rpc and not plus.supports_rest
    pro = _profile(series=Series.PRO, form_factor=FormFactor.DIN)
    assert pro.is_gen2_pro
    wave_pro = _profile(series=Series.WAVE_PRO)
    assert wave_pro.is_wave
    gen1 = _profile(generation=Generation.GEN1, series=Series.CLASSIC)
    assert gen1.is_gen1 and gen1.supports_rest and not gen1.is_gen2_plus


def test_device_info_from_dict_ignores_wrong_types() -> None:
    info = DeviceInfo.from_dict(
        {"model": "SNSW-001P16EU", "gen": "2", "app": 7, "auth_en": "yes", "extra": 1}
    )
    assert info.model == "SNSW-001P16EU"
    assert info.gen == 0
    assert info.app == ""
    assert info.auth_en is False


def test_gen1_status_from_dict() -> None:
    status = Gen1Status.from_dict({"type": "SHSW-1", "auth": True, "num_outputs": 1})
    assert status.type == "SHSW-1"
    assert status.auth is True
    assert status.num_outputs == 1


def test_detection_result_found() -> None:
    assert not DetectionResult(Generation.UNKNOWN).found
    assert DetectionResult(Generation.GEN2, profile=_profile()).found
