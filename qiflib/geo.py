"""Planar points, geographic coordinates and grids of cells."""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import count
from typing import Callable, Iterator

EARTH_RADIUS = 6378137.0
"""Earth radius in meters."""


@dataclass(frozen=True)
class Point:
    """A point in the plane."""

    x: float
    y: float

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


def rad_of_deg(ang: float) -> float:
    """Degrees to radians."""
    return ang * math.pi / 180


def deg_of_rad(ang: float) -> float:
    """Radians to degrees."""
    return ang * 180 / math.pi


@dataclass(frozen=True)
class LatLon:
    """A location given by latitude and longitude in degrees."""

    lat: float
    lon: float

    def __str__(self) -> str:
        return f"({self.lat},{self.lon})"

    def add_vector(self, distance: float, angle: float) -> "LatLon":
        """The location reached by moving distance meters in direction angle (radians)."""
        ang_distance = distance / EARTH_RADIUS
        lat1 = rad_of_deg(self.lat)
        lon1 = rad_of_deg(self.lon)

        lat2 = math.asin(
            math.sin(lat1) * math.cos(ang_distance)
            + math.cos(lat1) * math.sin(ang_distance) * math.cos(angle)
        )
        lon2 = lon1 + math.atan2(
            math.sin(angle) * math.sin(ang_distance) * math.cos(lat1),
            math.cos(ang_distance) - math.sin(lat1) * math.sin(lat2),
        )
        lon2 = math.fmod(lon2 + 3 * math.pi, 2 * math.pi) - math.pi
        return LatLon(deg_of_rad(lat2), deg_of_rad(lon2))


def cell_to_point(
    grid_width: int, cell_size: float = 1.0, corner: Point = Point(0.0, 0.0)
) -> Callable[[int], Point]:
    """A function mapping a grid cell id to the point at its center."""

    def convert(i: int) -> Point:
        return Point(
            (i % grid_width) * cell_size + corner.x,
            (i // grid_width) * cell_size + corner.y,
        )

    return convert


def point_to_cell(
    grid_width: int, cell_size: float = 1.0, corner: Point = Point(0.0, 0.0)
) -> Callable[[Point], int]:
    """A function mapping a point to the id of the grid cell containing it.

    Cell 0 is bottom-left, with its center at corner; ids grow left to right,
    then bottom to top.
    """
    left = corner.x - cell_size / 2
    bottom = corner.y - cell_size / 2

    def convert(p: Point) -> int:
        if not (p.x >= left and p.y >= bottom and p.x < left + grid_width * cell_size):
            raise ValueError("out of grid area")
        return int(
            math.floor((p.x - left) / cell_size)
            + math.floor((p.y - bottom) / cell_size) * grid_width
        )

    return convert


def grid_walk(cell_size: float = 1.0) -> Iterator[Point]:
    """Walk an infinite grid from (0,0) outwards, ring by ring.

    Ring r holds the points with max(|x|, |y|) == r (in cells).
    """
    yield Point(0 * cell_size, 0 * cell_size)
    for r in count(1):
        for yd in range(-r, r + 1):
            yield Point(r * cell_size, yd * cell_size)
        for yd in range(-r, r + 1):
            yield Point(-r * cell_size, yd * cell_size)
        for xd in range(-r + 1, r):
            yield Point(xd * cell_size, r * cell_size)
        for xd in range(-r + 1, r):
            yield Point(xd * cell_size, -r * cell_size)