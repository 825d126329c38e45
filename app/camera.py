from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Optional

EARTH_RADIUS_M = 6_371_000.0
EARTH_RADIUS_KM = EARTH_RADIUS_M / 1000.0

# Web map scale at zoom level 0; each level halves it.
ZOOM0_SCALE = 591_657_527.591555
SCALE_TO_ALTITUDE = 0.19
MIN_ALTITUDE_M = 100_000.0

# plotly scene units: the surface sits at this eye distance from the centre.
SURFACE_EYE_DISTANCE = 0.5

BASE_TRANSITION_FRAMES = 20


@dataclass
class Camera:
    longitude: float
    latitude: float
    altitude: float
    heading: float = 0.0
    tilt: float = 0.0

    def clone(self) -> "Camera":
        return replace(self)


def altitude_for_zoom(zoom: float) -> float:
    return ZOOM0_SCALE / (2 ** zoom) * SCALE_TO_ALTITUDE


def _shortest_delta(start: float, end: float) -> float:
    return ((end - start + 180.0) % 360.0) - 180.0


def _smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


class CameraTransition:
    """Animated move between two poses, advanced one frame per ``step``."""

    def __init__(self, start: Camera, end: Camera, speed_factor: float = 1.0):
        if speed_factor <= 0:
            raise ValueError("speed_factor must be positive.")
        self.start = start.clone()
        self.end = end.clone()
        self.frames = max(1, math.ceil(BASE_TRANSITION_FRAMES / speed_factor))
        self.frame = 0

    @property
    def done(self) -> bool:
        return self.frame >= self.frames

    def camera_at(self, t: float) -> Camera:
        if t >= 1.0:
            return self.end.clone()
        eased = _smoothstep(max(0.0, t))
        return Camera(
            longitude=self.start.longitude
            + _shortest_delta(self.start.longitude, self.end.longitude) * eased,
            latitude=self.start.latitude + (self.end.latitude - self.start.latitude) * eased,
            altitude=self.start.altitude + (self.end.altitude - self.start.altitude) * eased,
            heading=self.start.heading
            + _shortest_delta(self.start.heading, self.end.heading) * eased,
            tilt=self.start.tilt + (self.end.tilt - self.start.tilt) * eased,
        )

    def step(self) -> Camera:
        if not self.done:
            self.frame += 1
        return self.camera_at(self.frame / self.frames)


def _unit(lon_deg: float, lat_deg: float) -> tuple[float, float, float]:
    lon = math.radians(lon_deg)
    lat = math.radians(lat_deg)
    return (
        math.cos(lat) * math.cos(lon),
        math.cos(lat) * math.sin(lon),
        math.sin(lat),
    )


def _north_east(lon_deg: float, lat_deg: float):
    lon = math.radians(lon_deg)
    lat = math.radians(lat_deg)
    north = (-math.sin(lat) * math.cos(lon), -math.sin(lat) * math.sin(lon), math.cos(lat))
    east = (-math.sin(lon), math.cos(lon), 0.0)
    return north, east


def clamp_altitude(altitude: float, clip_far: Optional[float] = None) -> float:
    altitude = max(MIN_ALTITUDE_M, altitude)
    if clip_far is not None:
        altitude = min(altitude, clip_far)
    return altitude


def camera_to_eye(camera: Camera, clip_far: Optional[float] = None) -> Dict[str, Dict[str, float]]:
    altitude = clamp_altitude(camera.altitude, clip_far)
    distance = (EARTH_RADIUS_M + altitude) / EARTH_RADIUS_M * SURFACE_EYE_DISTANCE
    ux, uy, uz = _unit(camera.longitude, camera.latitude)
    north, east = _north_east(camera.longitude, camera.latitude)
    heading = math.radians(camera.heading)
    up = [math.cos(heading) * n + math.sin(heading) * e for n, e in zip(north, east)]
    return {
        "eye": {"x": ux * distance, "y": uy * distance, "z": uz * distance},
        "up": {"x": up[0], "y": up[1], "z": up[2]},
        "center": {"x": 0.0, "y": 0.0, "z": 0.0},
    }


def eye_to_camera(
    eye: Dict[str, float],
    up: Optional[Dict[str, float]] = None,
    base: Optional[Camera] = None,
    clip_far: Optional[float] = None,
) -> Camera:
    x, y, z = float(eye["x"]), float(eye["y"]), float(eye["z"])
    distance = math.sqrt(x * x + y * y + z * z)
    if distance == 0:
        raise ValueError("Camera eye cannot sit at the globe centre.")
    longitude = math.degrees(math.atan2(y, x))
    latitude = math.degrees(math.asin(max(-1.0, min(1.0, z / distance))))
    altitude = distance / SURFACE_EYE_DISTANCE * EARTH_RADIUS_M - EARTH_RADIUS_M
    heading = base.heading if base else 0.0
    if up:
        north, east = _north_east(longitude, latitude)
        up_vec = (float(up["x"]), float(up["y"]), float(up["z"]))
        along_north = sum(a * b for a, b in zip(up_vec, north))
        along_east = sum(a * b for a, b in zip(up_vec, east))
        if along_north or along_east:
            heading = math.degrees(math.atan2(along_east, along_north))
    return Camera(
        longitude=longitude,
        latitude=latitude,
        altitude=clamp_altitude(altitude, clip_far),
        heading=heading,
        tilt=base.tilt if base else 0.0,
    )
