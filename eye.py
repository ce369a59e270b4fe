r"""
Eye (sensor model) for EvoForage.

An eye sees food inside a cone in front of the animal:

            cell 0 … cell N-1
               \  |  /
                \ | /           fov_angle  – total width of the cone
                 \|/            fov_range  – how far the animal sees
                  @  →heading   cells      – number of equal angular sectors

Every visible food item adds  (fov_range − distance) / fov_range  to the
sector it falls in, so near food reads close to 1 and food at the edge of
the range reads close to 0.  Several items in one sector simply add up.
"""

import math

import numpy as np

from config import FOV_RANGE, FOV_ANGLE, EYE_CELLS


class Eye:
    __slots__ = ("fov_range", "fov_angle", "cells")

    def __init__(self, fov_range: float = FOV_RANGE,
                 fov_angle: float = FOV_ANGLE,
                 cells: int = EYE_CELLS):
        if fov_range <= 0:
            raise ValueError(f"fov_range must be positive, got {fov_range}")
        if not 0 < fov_angle <= 2 * math.pi:
            raise ValueError(f"fov_angle must be within (0, 2π], got {fov_angle}")
        if cells <= 0:
            raise ValueError(f"an eye needs at least one cell, got {cells}")
        self.fov_range = float(fov_range)
        self.fov_angle = float(fov_angle)
        self.cells     = int(cells)

    def process_vision(self, position, rotation: float, foods) -> np.ndarray:
        """
        Args:
            position: (x, y) of the animal
            rotation: heading in radians
            foods:    iterable of Food

        Returns:
            float array of shape (cells,)
        """
        cells = np.zeros(self.cells, dtype=np.float64)
        foods = list(foods)
        if not foods:
            return cells

        deltas    = np.array([f.position for f in foods], dtype=np.float64) - position
        distances = np.hypot(deltas[:, 0], deltas[:, 1])
        angles    = wrap_angle(np.arctan2(deltas[:, 1], deltas[:, 0]) - rotation)

        half = self.fov_angle / 2
        visible = (distances <= self.fov_range) & (np.abs(angles) <= half)
        if not visible.any():
            return cells

        sector = ((angles[visible] + half) / self.fov_angle * self.cells).astype(int)
        sector = np.minimum(sector, self.cells - 1)
        energy = (self.fov_range - distances[visible]) / self.fov_range

        # np.add.at so that several items in one sector accumulate
        np.add.at(cells, sector, energy)
        return cells

    def __repr__(self) -> str:
        return (f"Eye(fov_range={self.fov_range}, fov_angle={self.fov_angle:.4f}, "
                f"cells={self.cells})")


def wrap_angle(angle):
    """Wrap radians into [-π, π)."""
    return (angle + np.pi) % (2 * np.pi) - np.pi
