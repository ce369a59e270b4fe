"""
Animal for EvoForage.

Each animal has:
  - a position in the unit square and a heading (radians)
  - a speed, kept within [SPEED_MIN, SPEED_MAX]
  - an Eye (shared configuration, not evolved)
  - a Brain whose weights are its chromosome
  - `ate`, the number of food items eaten this generation (its fitness)
"""

import math

import numpy as np

from brain import Brain
from chromosome import Chromosome
from config import SPEED_MIN, SPEED_MAX
from eye import Eye
from genetic_algorithm import Individual


class Animal:
    __slots__ = ("position", "rotation", "speed", "eye", "brain", "ate")

    def __init__(self, position, rotation: float, speed: float,
                 eye: Eye, brain: Brain):
        self.position = np.array(position, dtype=np.float64)
        self.rotation = float(rotation)
        self.speed    = float(speed)
        self.eye      = eye
        self.brain    = brain
        self.ate      = 0

    @classmethod
    def random(cls, rng: np.random.Generator, eye: Eye = None) -> "Animal":
        eye = eye if eye is not None else Eye()
        brain = Brain.random(rng, eye)
        return cls._with_random_pose(rng, eye, brain)

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome,
                        rng: np.random.Generator, eye: Eye = None) -> "Animal":
        eye = eye if eye is not None else Eye()
        brain = Brain.from_chromosome(chromosome, eye)
        return cls._with_random_pose(rng, eye, brain)

    @classmethod
    def _with_random_pose(cls, rng, eye, brain) -> "Animal":
        position = rng.random(2)
        rotation = rng.uniform(0.0, 2 * math.pi)
        speed    = rng.uniform(SPEED_MIN, SPEED_MAX)
        return cls(position, rotation, speed, eye, brain)

    def as_chromosome(self) -> Chromosome:
        return self.brain.as_chromosome()

    def __repr__(self) -> str:
        x, y = self.position
        return (f"Animal(x={x:.3f}, y={y:.3f}, rotation={self.rotation:+.3f}, "
                f"speed={self.speed:.4f}, ate={self.ate})")


class AnimalIndividual(Individual):
    """Snapshot of an animal as the genetic algorithm sees it."""

    __slots__ = ("_fitness", "_chromosome")

    def __init__(self, fitness: float, chromosome: Chromosome):
        self._fitness    = float(fitness)
        self._chromosome = chromosome

    @classmethod
    def from_animal(cls, animal: Animal) -> "AnimalIndividual":
        return cls(animal.ate, animal.as_chromosome())

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome) -> "AnimalIndividual":
        return cls(0.0, chromosome)

    def into_animal(self, rng: np.random.Generator, eye: Eye = None) -> Animal:
        return Animal.from_chromosome(self._chromosome, rng, eye)

    @property
    def fitness(self) -> float:
        return self._fitness

    @property
    def chromosome(self) -> Chromosome:
        return self._chromosome
