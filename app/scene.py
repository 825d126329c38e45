"""Declarative scene configuration: base layers, view, renderer and elevation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

from config.app_metadata import COUNTRIES_URL, PLATES_URL

RGBA = Tuple[float, float, float, float]


@dataclass(frozen=True)
class BaseLayerConfig:
    name: str
    url: str
    color: RGBA
    width: float
    elevation_mode: str = "on-the-ground"


COUNTRY_BORDERS = BaseLayerConfig(
    name="Countries",
    url=COUNTRIES_URL,
    color=(255, 255, 255, 0.3),
    width=1,
)

PLATE_BOUNDARIES = BaseLayerConfig(
    name="Plate boundaries",
    url=PLATES_URL,
    color=(255, 255, 255, 0.8),
    width=2,
)


@dataclass(frozen=True)
class CameraPose:
    longitude: float
    latitude: float
    altitude: float
    heading: float
    tilt: float


@dataclass(frozen=True)
class ViewConfig:
    camera: CameraPose
    background: RGBA = (0, 0, 0, 0)
    stars_enabled: bool = False
    atmosphere_enabled: bool = False
    ui_components: Tuple[str, ...] = ()
    highlight_color: str = "cyan"
    padding_bottom: int = 200
    ground_opacity: float = 0.0
    navigation_constraint: str = "none"
    clip_far: float = 40_000_000.0
    height: int = 700


VIEW = ViewConfig(
    camera=CameraPose(
        longitude=-105.61273180,
        latitude=3.20596275,
        altitude=13086004.69753,
        heading=0.24,
        tilt=0.16,
    ),
)


@dataclass(frozen=True)
class ElevationInfo:
    """Places a feature at ``-depth * factor`` in ``unit``, relative to the surface."""

    name: str
    factor: float
    mode: str = "absolute-height"
    unit: str = "kilometers"

    @property
    def expression(self) -> str:
        if self.factor == 1:
            return "-$feature.depth"
        return f"-$feature.depth * {self.factor:g}"

    def height(self, depth: float) -> float:
        return -depth * self.factor


EXAGGERATED_ELEVATION = ElevationInfo(name="exaggerated", factor=6)
REAL_ELEVATION = ElevationInfo(name="real", factor=1)

ELEVATION_MODES = {
    EXAGGERATED_ELEVATION.name: EXAGGERATED_ELEVATION,
    REAL_ELEVATION.name: REAL_ELEVATION,
}


@dataclass(frozen=True)
class Stop:
    value: float
    output: object
    label: str


@dataclass(frozen=True)
class VisualVariable:
    kind: str
    field: str
    stops: Sequence[Stop]
    legend_title: str = ""


@dataclass(frozen=True)
class SphereRenderer:
    material: RGBA
    base_size: float
    visual_variables: Sequence[VisualVariable] = field(default_factory=tuple)

    def variable(self, kind: str) -> VisualVariable:
        for variable in self.visual_variables:
            if variable.kind == kind:
                return variable
        raise KeyError(kind)


EARTHQUAKE_RENDERER = SphereRenderer(
    material=(255, 250, 239, 0.8),
    base_size=10000,
    visual_variables=(
        VisualVariable(
            kind="size",
            field="mag",
            stops=(
                Stop(5.5, 70000, "<15%"),
                Stop(7, 250000, "25%"),
            ),
        ),
        VisualVariable(
            kind="color",
            field="mag",
            legend_title="Magnitude",
            stops=(
                Stop(6, (254, 240, 217), "4.5 - 6"),
                Stop(7, (179, 0, 0), ">7"),
            ),
        ),
    ),
)

POPUP_TITLE = "Image info"


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def interpolate_stops(stops: Sequence[Stop], value: float):
    """Return the stop output for ``value``, clamped outside the stop range.

    Outputs may be numbers or tuples of numbers (colours); tuples are
    interpolated component-wise.
    """
    if not stops:
        raise ValueError("At least one stop is required.")
    ordered = sorted(stops, key=lambda stop: stop.value)
    if value <= ordered[0].value:
        return ordered[0].output
    if value >= ordered[-1].value:
        return ordered[-1].output
    for low, high in zip(ordered, ordered[1:]):
        if low.value <= value <= high.value:
            t = (value - low.value) / (high.value - low.value)
            if isinstance(low.output, tuple):
                return tuple(_lerp(a, b, t) for a, b in zip(low.output, high.output))
            return _lerp(low.output, high.output, t)
    return ordered[-1].output
