"""
Neural Network Brain for EvoForage.

A plain feed-forward network:
  inputs → [hidden layers] → outputs

Every neuron computes  max(0, bias + Σ input·weight)  (ReLU).

The network can be flattened into a single stream of floats and rebuilt
from one.  The order is layer-major, then neuron-major, then bias followed
by that neuron's weights:

  L0.N0.bias, L0.N0.w0, L0.N0.w1, …, L0.N1.bias, …, L1.N0.bias, …

This order is the canonical chromosome encoding and must not change.
"""

from dataclasses import dataclass

import numpy as np

_END = object()


class DecodeError(ValueError):
    """Raised when a weight stream does not match the requested topology."""


@dataclass(frozen=True)
class LayerTopology:
    neurons: int


# ──────────────────────────────────────────────────────────────────────────────
# Neuron
# ──────────────────────────────────────────────────────────────────────────────

class Neuron:
    __slots__ = ("bias", "weights")

    def __init__(self, bias: float, weights):
        self.bias    = float(bias)
        self.weights = np.array(list(weights), dtype=np.float64)

    @classmethod
    def random(cls, rng: np.random.Generator, input_size: int) -> "Neuron":
        bias    = rng.uniform(-1.0, 1.0)
        weights = [rng.uniform(-1.0, 1.0) for _ in range(input_size)]
        return cls(bias, weights)

    @classmethod
    def from_weights(cls, input_size: int, weights) -> "Neuron":
        """Pull one bias and `input_size` weights off the iterator."""
        try:
            bias = next(weights)
            own  = [next(weights) for _ in range(input_size)]
        except StopIteration:
            raise DecodeError("got not enough weights") from None
        return cls(bias, own)

    def propagate(self, inputs: np.ndarray) -> float:
        if len(inputs) != len(self.weights):
            raise ValueError(
                f"got {len(inputs)} inputs, but {len(self.weights)} inputs were expected"
            )
        output = float(np.dot(inputs, self.weights)) + self.bias
        return max(0.0, output)

    def __repr__(self) -> str:
        return f"Neuron(bias={self.bias:+.3f}, weights={self.weights.tolist()!r})"


# ──────────────────────────────────────────────────────────────────────────────
# Layer
# ──────────────────────────────────────────────────────────────────────────────

class Layer:
    __slots__ = ("neurons",)

    def __init__(self, neurons: list):
        self.neurons = list(neurons)

    @classmethod
    def random(cls, rng: np.random.Generator,
               input_size: int, output_size: int) -> "Layer":
        return cls([Neuron.random(rng, input_size) for _ in range(output_size)])

    @classmethod
    def from_weights(cls, input_size: int, output_size: int, weights) -> "Layer":
        return cls([Neuron.from_weights(input_size, weights)
                    for _ in range(output_size)])

    @property
    def input_size(self) -> int:
        return len(self.neurons[0].weights) if self.neurons else 0

    def propagate(self, inputs: np.ndarray) -> np.ndarray:
        return np.array([n.propagate(inputs) for n in self.neurons],
                        dtype=np.float64)


# ──────────────────────────────────────────────────────────────────────────────
# Network
# ──────────────────────────────────────────────────────────────────────────────

class Network:
    """
    Fixed-topology feed-forward network.
    Immutable once built; a new generation gets a new Network.
    """

    def __init__(self, layers: list):
        self.layers = list(layers)

    @classmethod
    def random(cls, rng: np.random.Generator, topology) -> "Network":
        topology = _check_topology(topology)
        layers = [
            Layer.random(rng, topology[i].neurons, topology[i + 1].neurons)
            for i in range(len(topology) - 1)
        ]
        return cls(layers)

    @classmethod
    def from_weights(cls, topology, weights) -> "Network":
        """
        Rebuild a network from a flat weight stream.

        Consumes exactly `parameter_count(topology)` values; a stream that
        is too short or too long raises DecodeError.
        """
        topology = _check_topology(topology)
        weights  = iter(weights)
        layers = [
            Layer.from_weights(topology[i].neurons, topology[i + 1].neurons, weights)
            for i in range(len(topology) - 1)
        ]
        if next(weights, _END) is not _END:
            raise DecodeError("got too many weights")
        return cls(layers)

    @staticmethod
    def parameter_count(topology) -> int:
        """Number of floats (biases + weights) a topology encodes to."""
        topology = _check_topology(topology)
        return sum(
            (topology[i].neurons + 1) * topology[i + 1].neurons
            for i in range(len(topology) - 1)
        )

    # ──────────────────────────────────────────────────────────────────────────

    @property
    def topology(self) -> list:
        if not self.layers:
            return []
        sizes = [self.layers[0].input_size] + [len(l.neurons) for l in self.layers]
        return [LayerTopology(n) for n in sizes]

    def propagate(self, inputs) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            inputs: float array whose length equals the first layer's
                    input size

        Returns:
            float array of the last layer's size, every value >= 0
        """
        values = np.asarray(inputs, dtype=np.float64)
        for layer in self.layers:
            values = layer.propagate(values)
        return values

    def weights(self):
        """Lazily yield every parameter in canonical order."""
        for layer in self.layers:
            for neuron in layer.neurons:
                yield neuron.bias
                for w in neuron.weights:
                    yield float(w)


def _check_topology(topology) -> list:
    topology = list(topology)
    if len(topology) < 2:
        raise ValueError("a network needs at least an input and an output layer")
    for t in topology:
        if t.neurons <= 0:
            raise ValueError(f"layer sizes must be positive, got {t.neurons}")
    return topology
