"""
World for EvoForage.

The world is the unit square [0, 1) x [0, 1), wrapped at every edge
(an animal leaving on the right re-enters on the left).  It holds a
fixed number of animals and a fixed number of food items for the whole
run; only their contents change between generations.
"""

from dataclasses import dataclass

import numpy as np

from animal import Animal
from config import NUM_ANIMALS, NUM_FOODS
from eye import Eye


class Food:
    __slots__ = ("position",)

    def __init__(self, position):
        self.position = np.array(position, dtype=np.float64)

    @classmethod
    def random(cls, rng: np.random.Generator) -> "Food":
        return cls(rng.random(2))

    def respawn(self, rng: np.random.Generator):
        self.position = rng.random(2)

    def __repr__(self) -> str:
        return f"Food(x={self.position[0]:.3f}, y={self.position[1]:.3f})"


class World:
    """
    Container for one generation's animals and food.
    """

    def __init__(self, animals: list, foods: list):
        self.animals = list(animals)
        self.foods   = list(foods)

    @classmethod
    def random(cls, rng: np.random.Generator,
               num_animals: int = NUM_ANIMALS,
               num_foods: int = NUM_FOODS,
               eye: Eye = None) -> "World":
        if num_animals <= 0:
            raise ValueError(f"a world needs at least one animal, got {num_animals}")
        if num_foods < 0:
            raise ValueError(f"food count cannot be negative, got {num_foods}")
        eye = eye if eye is not None else Eye()
        animals = [Animal.random(rng, eye) for _ in range(num_animals)]
        foods   = [Food.random(rng) for _ in range(num_foods)]
        return cls(animals, foods)

    def food_positions(self) -> np.ndarray:
        """(num_foods, 2) array of the current food positions."""
        if not self.foods:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([f.position for f in self.foods], dtype=np.float64)

    # ──────────────────────────────────────────────────────────────────────────
    # Snapshot for visualisation
    # ──────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> "WorldSnapshot":
        """Immutable copy of everything a presentation layer needs."""
        return WorldSnapshot(
            animals=tuple(
                AnimalView(
                    x=float(a.position[0]),
                    y=float(a.position[1]),
                    rotation=a.rotation,
                    speed=a.speed,
                    ate=a.ate,
                )
                for a in self.animals
            ),
            foods=tuple(
                FoodView(x=float(f.position[0]), y=float(f.position[1]))
                for f in self.foods
            ),
        )


@dataclass(frozen=True)
class AnimalView:
    x: float
    y: float
    rotation: float
    speed: float
    ate: int


@dataclass(frozen=True)
class FoodView:
    x: float
    y: float


@dataclass(frozen=True)
class WorldSnapshot:
    animals: tuple
    foods: tuple

    def as_dict(self) -> dict:
        return {
            "animals": [
                {"x": a.x, "y": a.y, "rotation": a.rotation,
                 "speed": a.speed, "ate": a.ate}
                for a in self.animals
            ],
            "foods": [{"x": f.x, "y": f.y} for f in self.foods],
        }
