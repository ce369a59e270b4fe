"""
Genetic algorithm for EvoForage.

One call to GeneticAlgorithm.evolve() turns a scored population into a
new, unscored population of the same size:

  for every child slot:
    1. pick parent A and parent B  (selection – may be the same individual)
    2. mix their chromosomes        (crossover)
    3. perturb the child in place    (mutation)
    4. decode it into an Individual

Selection, crossover and mutation are strategy objects so each can be
tested and swapped on its own.  The random generator is always passed in
explicitly; the draw order per child is fixed (select A, select B,
crossover genes in order, mutation genes in order) so that a seed
reproduces a run exactly.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict

import numpy as np

from chromosome import Chromosome

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Contracts
# ──────────────────────────────────────────────────────────────────────────────

class Individual(ABC):
    """Anything the genetic algorithm can score and breed."""

    @property
    @abstractmethod
    def fitness(self) -> float:
        """Non-negative score; higher means more likely to be picked."""

    @property
    @abstractmethod
    def chromosome(self) -> Chromosome:
        ...

    @classmethod
    @abstractmethod
    def from_chromosome(cls, chromosome: Chromosome) -> "Individual":
        """Build an (unscored) individual around a child chromosome."""


class SelectionMethod(ABC):
    @abstractmethod
    def select(self, rng: np.random.Generator, population: list) -> Individual:
        ...


class CrossoverMethod(ABC):
    @abstractmethod
    def crossover(self, rng: np.random.Generator,
                  parent_a: Chromosome, parent_b: Chromosome) -> Chromosome:
        ...


class MutationMethod(ABC):
    @abstractmethod
    def mutate(self, rng: np.random.Generator, child: Chromosome) -> None:
        """Modify `child` in place."""


# ──────────────────────────────────────────────────────────────────────────────
# Selection
# ──────────────────────────────────────────────────────────────────────────────

class RouletteWheelSelection(SelectionMethod):
    """
    Fitness-proportional selection.

    An individual with fitness 4 is twice as likely to be picked as one
    with fitness 2.  When every fitness is zero there is nothing to weigh
    by, so every individual is equally likely instead.
    """

    def select(self, rng: np.random.Generator, population: list) -> Individual:
        if not population:
            raise ValueError("got empty population, not going to work")

        weights = np.array([ind.fitness for ind in population], dtype=np.float64)
        if np.any(weights < 0):
            raise ValueError("roulette-wheel selection needs non-negative fitness")

        total = weights.sum()
        if total <= 0:
            return population[int(rng.integers(0, len(population)))]
        return population[int(rng.choice(len(population), p=weights / total))]


# ──────────────────────────────────────────────────────────────────────────────
# Crossover
# ──────────────────────────────────────────────────────────────────────────────

class UniformCrossover(CrossoverMethod):
    """Each gene comes from parent A or parent B on an independent coin flip."""

    def crossover(self, rng: np.random.Generator,
                  parent_a: Chromosome, parent_b: Chromosome) -> Chromosome:
        if len(parent_a) != len(parent_b):
            raise ValueError(
                f"parents differ in length ({len(parent_a)} vs {len(parent_b)})"
            )
        from_a = rng.random(len(parent_a)) < 0.5
        return Chromosome(np.where(from_a, parent_a.genes, parent_b.genes))


# ──────────────────────────────────────────────────────────────────────────────
# Mutation
# ──────────────────────────────────────────────────────────────────────────────

class GaussianMutation(MutationMethod):
    """
    Bounded random perturbation of genes.

    Despite the name the step size is uniform, not normal:
      chance      – probability that a gene is touched (0 → nothing changes,
                    1 → every gene changes)
      coefficient – largest step; a touched gene moves by at most ±coefficient
    """

    def __init__(self, chance: float, coefficient: float):
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"mutation chance must be within [0, 1], got {chance}")
        if coefficient < 0.0:
            raise ValueError(f"mutation coefficient must be >= 0, got {coefficient}")
        self.chance      = chance
        self.coefficient = coefficient

    def mutate(self, rng: np.random.Generator, child: Chromosome) -> None:
        for i in range(len(child)):
            sign = 1.0 if rng.random() < 0.5 else -1.0
            if rng.random() < self.chance:
                child[i] = child[i] + sign * self.coefficient * rng.random()

    def __repr__(self) -> str:
        return f"GaussianMutation(chance={self.chance}, coefficient={self.coefficient})"


# ──────────────────────────────────────────────────────────────────────────────
# Statistics
# ──────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Statistics:
    min_fitness: float
    max_fitness: float
    avg_fitness: float

    @classmethod
    def from_population(cls, population: list) -> "Statistics":
        if not population:
            raise ValueError("cannot compute statistics of an empty population")
        fitness = np.array([ind.fitness for ind in population], dtype=np.float64)
        return cls(
            min_fitness=float(fitness.min()),
            max_fitness=float(fitness.max()),
            avg_fitness=float(fitness.mean()),
        )

    def as_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        return (f"min={self.min_fitness:.2f} max={self.max_fitness:.2f} "
                f"avg={self.avg_fitness:.2f}")


# ──────────────────────────────────────────────────────────────────────────────
# Engine
# ──────────────────────────────────────────────────────────────────────────────

class GeneticAlgorithm:

    def __init__(self, selection_method: SelectionMethod,
                 crossover_method: CrossoverMethod,
                 mutation_method: MutationMethod):
        self.selection_method = selection_method
        self.crossover_method = crossover_method
        self.mutation_method  = mutation_method

    def evolve(self, rng: np.random.Generator, population: list):
        """
        Breed the next generation.

        Returns:
            (children, stats) – `len(population)` new individuals and the
            fitness statistics of the population that was passed in.
        """
        if not population:
            raise ValueError("got empty population, not going to work")

        stats = Statistics.from_population(population)
        if stats.max_fitness == 0:
            logger.warning("every individual has zero fitness; "
                           "falling back to uniform selection")

        individual_type = type(population[0])
        children = []
        for _ in range(len(population)):
            parent_a = self.selection_method.select(rng, population).chromosome
            parent_b = self.selection_method.select(rng, population).chromosome
            child = self.crossover_method.crossover(rng, parent_a, parent_b)
            self.mutation_method.mutate(rng, child)
            children.append(individual_type.from_chromosome(child))

        return children, stats
