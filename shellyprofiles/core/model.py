"""Core data models used across loader, registry, detection, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import Any, Mapping


class Generation(IntEnum):
    UNKNOWN = 0
    GEN1 = 1
    GEN2 = 2
    GEN3 = 3
    GEN4 = 4

    @classmethod
    def from_number(cls, value: Any) -> Generation:
        """Map a payload generation number to a member, UNKNOWN for anything else."""
        if isinstance(value, bool) or not isinstance(value, int):
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_rpc(self) -> bool:
        return Generation.GEN2 <= self <= Generation.GEN4

    @property
    def is_rest(self) -> bool:
        return self is Generation.GEN1

    def __str__(self) -> str:
        if self is Generation.UNKNOWN:
            return "Unknown"
        return f"Gen{self.value}"


class Series(str, Enum):
    CLASSIC = "classic"
    PLUS = "plus"
    PRO = "pro"
    MINI = "mini"
    BLU = "blu"
    WAVE = "wave"
    WAVE_PRO = "wave_pro"
    STANDARD = "standard"


class FormFactor(str, Enum):
    DIN = "din"
    FLUSH = "flush"
    PLUG = "plug"
    BULB = "bulb"
    SENSOR = "sensor"
    WALL_MOUNT = "wall_mount"
    DESKTOP = "desktop"
    OUTDOOR = "outdoor"
    RADIATOR = "radiator"


class PowerSource(str, Enum):
    MAINS = "mains"
    BATTERY = "battery"
    USB = "usb"
    DC = "dc"
    POE = "poe"


class SensorType(str, Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    MOTION = "motion"
    CONTACT = "contact"
    VIBRATION = "vibration"
    TILT = "tilt"
    ILLUMINANCE = "illuminance"
    FLOOD = "flood"
    SMOKE = "smoke"
    GAS = "gas"
    BATTERY = "battery"
    VOLTAGE = "voltage"
    CURRENT = "current"
    POWER = "power"
    ENERGY = "energy"
    POWER_FACTOR = "power_factor"


class ComponentType(str, Enum):
    """Component tags as used in device RPC keys (``switch:0``, ``pm1:0`` ...)."""

    SWITCH = "switch"
    COVER = "cover"
    LIGHT = "light"
    RGB = "rgb"
    RGBW = "rgbw"
    INPUT = "input"
    PM = "pm"
    PM1 = "pm1"
    EM = "em"
    EM1 = "em1"
    VOLTMETER = "voltmeter"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    SMOKE = "smoke"
    THERMOSTAT = "thermostat"
    DEVICE_POWER = "devicepower"
    WIFI = "wifi"
    ETHERNET = "eth"
    BLE = "ble"
    CLOUD = "cloud"
    MQTT = "mqtt"
    WEBHOOK = "webhook"
    SCRIPT = "script"
    SCHEDULE = "schedule"
    KVS = "kvs"


@dataclass(frozen=True)
class Components:
    switches: int = 0
    covers: int = 0
    lights: int = 0
    inputs: int = 0
    outputs: int = 0
    power_meters: int = 0
    energy_meters: int = 0
    voltmeters: int = 0
    temperature_sensors: int = 0
    humidity_sensors: int = 0
    adc_channels: int = 0
    rgb_channels: int = 0
    white_channels: int = 0
    thermostat: bool = False
    display: bool = False


@dataclass(frozen=True)
class Capabilities:
    power_metering: bool = False
    energy_metering: bool = False
    cover_support: bool = False
    dimming_support: bool = False
    color_support: bool = False
    color_temperature: bool = False
    scripting: bool = False
    schedules: bool = False
    advanced_schedules: bool = False
    webhooks: bool = False
    kvs: bool = False
    virtual_components: bool = False
    actions: bool = False
    sensor_addon: bool = False
    external_sensors: bool = False
    calibration: bool = False
    input_events: bool = False
    effects: bool = False
    no_neutral: bool = False
    bidirectional_metering: bool = False
    three_phase: bool = False

    def enabled(self) -> tuple[str, ...]:
        return _enabled_flags(self)


@dataclass(frozen=True)
class Protocols:
    http: bool = False
    websocket: bool = False
    mqtt: bool = False
    coiot: bool = False
    ble: bool = False
    matter: bool = False
    zigbee: bool = False
    zwave: bool = False
    ethernet: bool = False

    def enabled(self) -> tuple[str, ...]:
        return _enabled_flags(self)


@dataclass(frozen=True)
class Limits:
    max_scripts: int = 0
    max_schedules: int = 0
    max_webhooks: int = 0
    max_kvs_entries: int = 0
    max_script_size: int = 0
    max_input_current: float = 0.0
    max_output_current: float = 0.0
    max_power: float = 0.0
    max_voltage: float = 0.0
    min_voltage: float = 0.0


def _enabled_flags(record: Capabilities | Protocols) -> tuple[str, ...]:
    return tuple(f.name for f in fields(record) if getattr(record, f.name))


DEFAULT_GEN1_CAPABILITIES = Capabilities(schedules=True, actions=True)
DEFAULT_GEN2_CAPABILITIES = Capabilities(
    scripting=True,
    schedules=True,
    advanced_schedules=True,
    webhooks=True,
    kvs=True,
    virtual_components=True,
    input_events=True,
)
DEFAULT_GEN1_PROTOCOLS = Protocols(http=True, mqtt=True, coiot=True)
DEFAULT_GEN2_PROTOCOLS = Protocols(http=True, websocket=True, mqtt=True, ble=True)
DEFAULT_GEN1_LIMITS = Limits(max_schedules=10)
DEFAULT_GEN2_LIMITS = Limits(
    max_scripts=10,
    max_schedules=20,
    max_webhooks=20,
    max_kvs_entries=100,
    max_script_size=16384,
)


@dataclass(frozen=True)
class Profile:
    """Static descriptor of one device model.

    Profiles are immutable; the only way to change what a model resolves to is
    to register a new profile for the same model.
    """

    model: str
    name: str
    generation: Generation
    series: Series
    form_factor: FormFactor
    power_source: PowerSource
    components: Components = field(default_factory=Components)
    capabilities: Capabilities = field(default_factory=Capabilities)
    protocols: Protocols = field(default_factory=Protocols)
    limits: Limits = field(default_factory=Limits)
    sensors: tuple[SensorType, ...] = ()
    app: str = ""

    def has_sensor(self, sensor: SensorType) -> bool:
        return sensor in self.sensors

    def has_component(self, component_type: ComponentType | str) -> bool:
        ct = _coerce_component_type(component_type)
        if ct is None:
            return False
        if ct is ComponentType.COVER:
            return self.components.covers > 0 or self.capabilities.cover_support
        if ct is ComponentType.TEMPERATURE:
            return self.components.temperature_sensors > 0 or self.has_sensor(SensorType.TEMPERATURE)
        if ct is ComponentType.HUMIDITY:
            return self.components.humidity_sensors > 0 or self.has_sensor(SensorType.HUMIDITY)
        if ct is ComponentType.SMOKE:
            return self.has_sensor(SensorType.SMOKE)
        if ct is ComponentType.THERMOSTAT:
            return self.components.thermostat
        return self.component_count(ct) > 0

    def component_count(self, component_type: ComponentType | str) -> int:
        ct = _coerce_component_type(component_type)
        attr = _COMPONENT_COUNT_FIELDS.get(ct) if ct is not None else None
        if attr is None:
            return 0
        return getattr(self.components, attr)

    @property
    def is_gen1(self) -> bool:
        return self.generation is Generation.GEN1

    @property
    def is_gen2_plus(self) -> bool:
        return self.generation is Generation.GEN2 and self.series is Series.PLUS

    @property
    def is_gen2_pro(self) -> bool:
        return self.generation is Generation.GEN2 and self.series is Series.PRO

    @property
    def is_gen3(self) -> bool:
        return self.generation is Generation.GEN3

    @property
    def is_gen4(self) -> bool:
        return self.generation is Generation.GEN4

    @property
    def is_blu(self) -> bool:
        return self.series is Series.BLU

    @property
    def is_wave(self) -> bool:
        return self.series in (Series.WAVE, Series.WAVE_PRO)

    @property
    def is_mini(self) -> bool:
        return self.series is Series.MINI

    @property
    def supports_rpc(self) -> bool:
        return self.generation.is_rpc

    @property
    def supports_rest(self) -> bool:
        return self.generation.is_rest

    @property
    def is_battery_powered(self) -> bool:
        return self.power_source is PowerSource.BATTERY


# Smoke and thermostat are presence-only; they have no count field.
_COMPONENT_COUNT_FIELDS: dict[ComponentType, str] = {
    ComponentType.SWITCH: "switches",
    ComponentType.COVER: "covers",
    ComponentType.LIGHT: "lights",
    ComponentType.INPUT: "inputs",
    ComponentType.PM: "power_meters",
    ComponentType.PM1: "power_meters",
    ComponentType.EM: "energy_meters",
    ComponentType.EM1: "energy_meters",
    ComponentType.VOLTMETER: "voltmeters",
    ComponentType.TEMPERATURE: "temperature_sensors",
    ComponentType.HUMIDITY: "humidity_sensors",
    ComponentType.RGB: "rgb_channels",
    ComponentType.RGBW: "rgb_channels",
}


def _coerce_component_type(value: ComponentType | str) -> ComponentType | None:
    if isinstance(value, ComponentType):
        return value
    try:
        return ComponentType(str(value).lower())
    except ValueError:
        return None


def _str_field(doc: Mapping[str, Any], key: str) -> str:
    value = doc.get(key)
    return value if isinstance(value, str) else ""


def _int_field(doc: Mapping[str, Any], key: str) -> int:
    value = doc.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _bool_field(doc: Mapping[str, Any], key: str) -> bool:
    value = doc.get(key)
    return value if isinstance(value, bool) else False


@dataclass(frozen=True)
class DeviceInfo:
    """Gen2+ ``Shelly.GetDeviceInfo`` / ``/shelly`` response."""

    id: str = ""
    model: str = ""
    gen: int = 0
    app: str = ""
    fw_id: str = ""
    profile: str = ""
    auth_en: bool = False
    auth_domain: str = ""
    mac: str = ""

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> DeviceInfo:
        return cls(
            id=_str_field(doc, "id"),
            model=_str_field(doc, "model"),
            gen=_int_field(doc, "gen"),
            app=_str_field(doc, "app"),
            fw_id=_str_field(doc, "fw_id"),
            profile=_str_field(doc, "profile"),
            auth_en=_bool_field(doc, "auth_en"),
            auth_domain=_str_field(doc, "auth_domain"),
            mac=_str_field(doc, "mac"),
        )


@dataclass(frozen=True)
class Gen1Status:
    """Gen1 ``/shelly`` response."""

    type: str = ""
    mac: str = ""
    auth: bool = False
    fw: str = ""
    hostname: str = ""
    num_outputs: int = 0
    num_meters: int = 0
    num_emeters: int = 0
    num_rollers: int = 0

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> Gen1Status:
        return cls(
            type=_str_field(doc, "type"),
            mac=_str_field(doc, "mac"),
            auth=_bool_field(doc, "auth"),
            fw=_str_field(doc, "fw"),
            hostname=_str_field(doc, "hostname"),
            num_outputs=_int_field(doc, "num_outputs"),
            num_meters=_int_field(doc, "num_meters"),
            num_emeters=_int_field(doc, "num_emeters"),
            num_rollers=_int_field(doc, "num_rollers"),
        )


@dataclass(frozen=True)
class DetectionResult:
    generation: Generation
    model: str = ""
    app: str = ""
    profile: Profile | None = None

    @property
    def found(self) -> bool:
        return self.profile is not None
