"""Tests for World and the Simulation driver."""

import dataclasses
import math

import numpy as np
import pytest

from animal import Animal
from brain import Brain
from config import FOOD_PICKUP_RADIUS, ROTATION_ACCEL, SPEED_MAX, SPEED_MIN
from eye import Eye
from genetic_algorithm import Statistics
from neural_network import Layer, Network, Neuron
from simulation import Simulation, wrap_unit
from world import Food, World


def idle_brain(eye):
    """Brain whose outputs are always zero."""
    hidden = Layer([Neuron(-1.0, [0.0] * eye.cells) for _ in range(2 * eye.cells)])
    output = Layer([Neuron(0.0, [0.0] * (2 * eye.cells)) for _ in range(2)])
    return Brain(Network([hidden, output]))


def idle_animal(position, rotation=0.0, speed=SPEED_MIN):
    eye = Eye()
    return Animal(position, rotation, speed, eye, idle_brain(eye))


class TestWorld:

    def test_random_has_requested_counts(self, rng):
        world = World.random(rng, num_animals=5, num_foods=7)

        assert len(world.animals) == 5
        assert len(world.foods) == 7

    def test_rejects_empty_population(self, rng):
        with pytest.raises(ValueError):
            World.random(rng, num_animals=0)

    def test_snapshot_is_read_only(self, rng):
        snapshot = World.random(rng, num_animals=2, num_foods=2).snapshot()

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.animals[0].x = 0.5
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.foods = ()

    def test_snapshot_does_not_follow_the_world(self, rng):
        world = World.random(rng, num_animals=1, num_foods=1)
        snapshot = world.snapshot()
        world.foods[0].respawn(rng)

        assert (snapshot.foods[0].x, snapshot.foods[0].y) != tuple(world.foods[0].position)

    def test_snapshot_as_dict(self, rng):
        data = World.random(rng, num_animals=3, num_foods=4).snapshot().as_dict()

        assert len(data["animals"]) == 3
        assert len(data["foods"]) == 4
        assert set(data["animals"][0]) == {"x", "y", "rotation", "speed", "ate"}


class TestStep:

    def test_movement_wraps_around_edges(self, rng):
        animals = [
            idle_animal([0.9995, 0.5], rotation=0.0, speed=SPEED_MAX),
            idle_animal([0.5, 0.0001], rotation=-math.pi / 2, speed=SPEED_MAX),
            idle_animal([0.0001, 0.9999], rotation=3 * math.pi / 4, speed=SPEED_MAX),
        ]
        sim = Simulation(World(animals, []), generation_length=100)

        sim.step(rng)

        for a in sim.world().animals:
            assert 0.0 <= a.x < 1.0
            assert 0.0 <= a.y < 1.0
        assert sim.world().animals[0].x < 0.01
        assert sim.world().animals[1].y > 0.99

    def test_positions_stay_in_unit_square(self, rng):
        sim = Simulation.random(rng, num_animals=10, num_foods=10, generation_length=1000)

        for _ in range(50):
            sim.step(rng)
            for a in sim.world().animals:
                assert 0.0 <= a.x < 1.0 and 0.0 <= a.y < 1.0

    def test_speed_stays_within_bounds(self, rng):
        sim = Simulation.random(rng, num_animals=10, num_foods=30, generation_length=1000)

        for _ in range(20):
            sim.step(rng)
            for a in sim.world().animals:
                assert SPEED_MIN <= a.speed <= SPEED_MAX

    def test_idle_animal_moves_along_heading(self, rng):
        sim = Simulation(World([idle_animal([0.5, 0.5], rotation=math.pi / 2)], []),
                         generation_length=100)

        sim.step(rng)

        animal = sim.world().animals[0]
        assert animal.x == pytest.approx(0.5)
        assert animal.y == pytest.approx(0.5 + SPEED_MIN)

    def test_eating_counts_and_respawns_food(self, rng):
        animal = idle_animal([0.5, 0.5])
        near = Food([0.5 + FOOD_PICKUP_RADIUS / 2, 0.5])
        far = Food([0.1, 0.1])
        sim = Simulation(World([animal], [near, far]), generation_length=100)

        sim.step(rng)

        assert sim.world().animals[0].ate == 1
        assert not np.allclose(near.position, [0.5 + FOOD_PICKUP_RADIUS / 2, 0.5])
        assert np.allclose(far.position, [0.1, 0.1])

    def test_age_counts_ticks(self, rng):
        sim = Simulation.random(rng, num_animals=2, num_foods=2, generation_length=5)

        sim.step(rng)
        sim.step(rng)

        assert sim.age == 2
        assert sim.generation == 0


class TestGeneration:

    def test_stepping_one_generation(self, rng):
        length = 30
        sim = Simulation.random(rng, num_animals=8, num_foods=40, generation_length=length)

        results = [sim.step(rng) for _ in range(length)]

        assert all(r is None for r in results[:-1])
        stats = results[-1]
        assert isinstance(stats, Statistics)
        assert stats.max_fitness >= stats.avg_fitness >= stats.min_fitness >= 0
        assert sim.age == 0
        assert sim.generation == 1

    def test_population_size_is_conserved(self, rng):
        sim = Simulation.random(rng, num_animals=6, num_foods=10, generation_length=5)

        for _ in range(3):
            sim.train(rng)
            assert len(sim.world().animals) == 6
            assert len(sim.world().foods) == 10

    def test_new_generation_starts_hungry(self, rng):
        animal = idle_animal([0.5, 0.5])
        food = Food([0.5, 0.5])
        sim = Simulation(World([animal], [food]), generation_length=1)

        stats = sim.step(rng)

        assert stats.max_fitness == 1.0
        assert sim.world().animals[0].ate == 0

    def test_transition_keeps_brains_of_sole_parent(self, rng):
        from genetic_algorithm import (GaussianMutation, GeneticAlgorithm,
                                       RouletteWheelSelection, UniformCrossover)
        animal = idle_animal([0.5, 0.5])
        chromosome = animal.as_chromosome()
        ga = GeneticAlgorithm(RouletteWheelSelection(), UniformCrossover(),
                              GaussianMutation(0.0, 0.0))
        sim = Simulation(World([animal], []), ga=ga, generation_length=2)

        sim.train(rng)

        assert sim._world.animals[0] is not animal
        assert sim._world.animals[0].as_chromosome() == chromosome

    def test_train_runs_exactly_one_generation(self, rng):
        sim = Simulation.random(rng, num_animals=4, num_foods=10, generation_length=7)
        sim.step(rng)

        stats = sim.train(rng)

        assert isinstance(stats, Statistics)
        assert sim.generation == 1
        assert sim.age == 0

    def test_run_reports_every_generation(self, rng):
        sim = Simulation.random(rng, num_animals=4, num_foods=10, generation_length=3)
        seen = []

        history = sim.run(rng, 3, on_generation=lambda g, s, snap: seen.append((g, s)))

        assert len(history) == 3
        assert [g for g, _ in seen] == [1, 2, 3]
        assert [s for _, s in seen] == history

    def test_generation_is_logged(self, rng, caplog):
        sim = Simulation.random(rng, num_animals=2, num_foods=2, generation_length=2)

        with caplog.at_level("INFO", logger="simulation"):
            sim.train(rng)

        assert "generation 0 finished" in caplog.text

    def test_same_seed_same_run(self):
        def run(seed):
            rng = np.random.default_rng(seed)
            sim = Simulation.random(rng, num_animals=5, num_foods=20, generation_length=10)
            history = sim.run(rng, 2)
            return history, sim.world()

        assert run(11) == run(11)


def test_rejects_non_positive_generation_length(rng):
    with pytest.raises(ValueError):
        Simulation(World.random(rng, 1, 1), generation_length=0)


@pytest.mark.parametrize("values, expected", [
    ([1.2, -0.25], [0.2, 0.75]),
    ([0.0, 0.999], [0.0, 0.999]),
    ([-1e-20, 1.0], [0.0, 0.0]),
])
def test_wrap_unit(values, expected):
    assert wrap_unit(np.array(values)) == pytest.approx(expected)


def test_rejects_empty_world():
    with pytest.raises(ValueError):
        Simulation(World([], []))


def spinning_animal(position):
    """Animal whose brain asks for far more speed and turn than allowed."""
    eye = Eye()
    hidden = Layer([Neuron(1.0, [0.0] * eye.cells) for _ in range(2 * eye.cells)])
    output = Layer([Neuron(0.0, [10.0] * (2 * eye.cells)) for _ in range(2)])
    return Animal(position, 0.0, SPEED_MIN, eye, Brain(Network([hidden, output])))


def test_brain_output_is_clamped(rng):
    sim = Simulation(World([spinning_animal([0.5, 0.5])], []), generation_length=100)

    sim.step(rng)

    animal = sim.world().animals[0]
    assert animal.rotation == pytest.approx(ROTATION_ACCEL)
    assert animal.speed == SPEED_MAX


def test_generation_boundary_reshuffles_food(rng):
    start = [[0.1, 0.1], [0.2, 0.8], [0.9, 0.3]]
    foods = [Food(p) for p in start]
    sim = Simulation(World([idle_animal([0.5, 0.5])], foods), generation_length=1)

    assert sim.step(rng) is not None

    for food, before in zip(foods, start):
        assert not np.allclose(food.position, before)
