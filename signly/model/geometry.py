"""Page-relative coordinate helpers.

Fields are stored as fractions of the rendered page viewport so they stay
valid across zoom changes. Pixel positions are only derived for painting and
hit-testing.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float
    height: float

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def to_normalized(pixel_x: float, pixel_y: float, viewport: Viewport) -> tuple[float, float]:
    if not viewport.is_valid:
        raise ValueError(f"Viewport must have positive dimensions: {viewport}")
    return clamp_unit(pixel_x / viewport.width), clamp_unit(pixel_y / viewport.height)


def to_pixels(x: float, y: float, viewport: Viewport) -> tuple[float, float]:
    return x * viewport.width, y * viewport.height


def marker_center(
    pointer_x: float,
    pointer_y: float,
    grab_offset: tuple[float, float],
    marker_size: float,
) -> tuple[float, float]:
    """Return the marker center for a pointer holding it at *grab_offset*.

    *grab_offset* is the distance between the pointer and the marker's
    top-left corner recorded when the marker was pressed.
    """
    half = marker_size / 2.0
    return pointer_x - grab_offset[0] + half, pointer_y - grab_offset[1] + half


def marker_top_left(
    x: float,
    y: float,
    viewport: Viewport,
    marker_size: float,
) -> tuple[float, float]:
    center_x, center_y = to_pixels(x, y, viewport)
    half = marker_size / 2.0
    return center_x - half, center_y - half
