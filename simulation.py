"""
Simulation Engine for EvoForage.

Every call to step() advances the world by one tick:
  1. collisions – animals eat food they touch, eaten food respawns
  2. brains     – each animal looks, thinks, and adjusts speed / heading
  3. movement   – each animal moves forward and wraps around the edges
  4. age        – after `generation_length` ticks the population is
                  replaced by the genetic algorithm and food is reshuffled

The random generator is passed into every call that needs one; the
simulation never keeps its own.
"""

import logging

import numpy as np

from animal import AnimalIndividual
from config import (
    NUM_ANIMALS, NUM_FOODS, GENERATION_LENGTH,
    SPEED_MIN, SPEED_MAX, SPEED_ACCEL, ROTATION_ACCEL,
    FOOD_PICKUP_RADIUS, MUTATION_CHANCE, MUTATION_COEFFICIENT,
)
from eye import wrap_angle
from genetic_algorithm import (
    GeneticAlgorithm, RouletteWheelSelection, UniformCrossover,
    GaussianMutation,
)
from world import World

logger = logging.getLogger(__name__)


def default_genetic_algorithm(mutation_chance: float = MUTATION_CHANCE,
                              mutation_coefficient: float = MUTATION_COEFFICIENT):
    return GeneticAlgorithm(
        RouletteWheelSelection(),
        UniformCrossover(),
        GaussianMutation(mutation_chance, mutation_coefficient),
    )


class Simulation:
    """
    Main simulation controller.
    """

    def __init__(self, world: World, ga: GeneticAlgorithm = None,
                 generation_length: int = GENERATION_LENGTH):
        if generation_length <= 0:
            raise ValueError(f"generation_length must be positive, got {generation_length}")
        if not world.animals:
            raise ValueError("got empty population, not going to work")
        self._world           = world
        self.ga                = ga if ga is not None else default_genetic_algorithm()
        self.generation_length = generation_length
        self.age               = 0
        self.generation        = 0

    @classmethod
    def random(cls, rng: np.random.Generator,
               num_animals: int = NUM_ANIMALS,
               num_foods: int = NUM_FOODS,
               generation_length: int = GENERATION_LENGTH,
               mutation_chance: float = MUTATION_CHANCE,
               mutation_coefficient: float = MUTATION_COEFFICIENT) -> "Simulation":
        ga    = default_genetic_algorithm(mutation_chance, mutation_coefficient)
        world = World.random(rng, num_animals, num_foods)
        return cls(world, ga, generation_length)

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    def world(self):
        """Read-only snapshot of the current world."""
        return self._world.snapshot()

    def step(self, rng: np.random.Generator):
        """
        Advance one tick.

        Returns:
            Statistics of the finished generation if this tick closed one,
            otherwise None.
        """
        self._process_collisions(rng)
        self._process_brains()
        self._process_movement()

        self.age += 1
        if self.age >= self.generation_length:
            return self._evolve(rng)
        return None

    def train(self, rng: np.random.Generator):
        """Step until the current generation ends and return its statistics."""
        while True:
            stats = self.step(rng)
            if stats is not None:
                return stats

    def run(self, rng: np.random.Generator, generations: int,
            on_generation=None) -> list:
        """
        Train for `generations` generations.

        `on_generation(generation, stats, snapshot)` is called after each
        one, with the world as it looks right after replacement.
        """
        history = []
        for _ in range(generations):
            stats = self.train(rng)
            history.append(stats)
            if on_generation:
                on_generation(self.generation, stats, self.world())
        return history

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def _process_collisions(self, rng: np.random.Generator):
        foods = self._world.foods
        if not foods:
            return
        for animal in self._world.animals:
            deltas    = self._world.food_positions() - animal.position
            distances = np.hypot(deltas[:, 0], deltas[:, 1])
            for idx in np.flatnonzero(distances <= FOOD_PICKUP_RADIUS):
                animal.ate += 1
                foods[idx].respawn(rng)

    def _process_brains(self):
        foods = self._world.foods
        for animal in self._world.animals:
            vision   = animal.eye.process_vision(animal.position, animal.rotation, foods)
            response = animal.brain.propagate(vision)

            speed    = float(np.clip(response[0], -SPEED_ACCEL, SPEED_ACCEL))
            rotation = float(np.clip(response[1], -ROTATION_ACCEL, ROTATION_ACCEL))

            animal.speed    = float(np.clip(animal.speed + speed, SPEED_MIN, SPEED_MAX))
            animal.rotation = float(wrap_angle(animal.rotation + rotation))

    def _process_movement(self):
        for animal in self._world.animals:
            heading = np.array([np.cos(animal.rotation), np.sin(animal.rotation)])
            animal.position = wrap_unit(animal.position + animal.speed * heading)

    # ──────────────────────────────────────────────────────────────────────────
    # Generation boundary
    # ──────────────────────────────────────────────────────────────────────────

    def _evolve(self, rng: np.random.Generator):
        self.age = 0

        population = [AnimalIndividual.from_animal(a) for a in self._world.animals]
        eye = self._world.animals[0].eye
        children, stats = self.ga.evolve(rng, population)

        self._world.animals = [child.into_animal(rng, eye) for child in children]
        for food in self._world.foods:
            food.respawn(rng)

        logger.info("generation %d finished: %s", self.generation, stats)
        self.generation += 1
        return stats


def wrap_unit(position: np.ndarray) -> np.ndarray:
    """Wrap coordinates into [0, 1)."""
    wrapped = np.mod(position, 1.0)
    # a tiny negative input rounds up to exactly 1.0
    wrapped[wrapped >= 1.0] = 0.0
    return wrapped
