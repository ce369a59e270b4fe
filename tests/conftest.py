"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from chromosome import Chromosome
from genetic_algorithm import Individual


@pytest.fixture
def rng():
    """Seeded generator so every test is reproducible."""
    return np.random.default_rng(0)


class ScoredIndividual(Individual):
    """
    Test individual.  Built with an explicit fitness, or – when bred by the
    genetic algorithm – scored by the sum of its genes (floored at zero).
    """

    def __init__(self, fitness=None, chromosome=None):
        self._fitness = fitness
        self._chromosome = chromosome

    @property
    def fitness(self):
        if self._fitness is not None:
            return self._fitness
        return max(0.0, sum(self._chromosome))

    @property
    def chromosome(self):
        if self._chromosome is None:
            raise AttributeError("individual was built from fitness only")
        return self._chromosome

    @classmethod
    def from_chromosome(cls, chromosome):
        return cls(chromosome=chromosome)


@pytest.fixture
def make_individual():
    def _make(genes=None, fitness=None):
        chromosome = Chromosome(genes) if genes is not None else None
        return ScoredIndividual(fitness=fitness, chromosome=chromosome)
    return _make
