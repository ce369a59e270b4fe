"""
Brain for EvoForage.

Pairs a Network with the chromosome contract.  The topology is derived
from the eye's resolution:

  eye cells → 2 × eye cells → 2   (speed delta, rotation delta)
"""

from chromosome import Chromosome
from eye import Eye
from neural_network import LayerTopology, Network


class Brain:
    __slots__ = ("nn",)

    def __init__(self, nn: Network):
        self.nn = nn

    @classmethod
    def random(cls, rng, eye: Eye) -> "Brain":
        return cls(Network.random(rng, cls.topology(eye)))

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome, eye: Eye) -> "Brain":
        return cls(Network.from_weights(cls.topology(eye), chromosome))

    def as_chromosome(self) -> Chromosome:
        return Chromosome(self.nn.weights())

    def propagate(self, vision):
        return self.nn.propagate(vision)

    @staticmethod
    def topology(eye: Eye) -> list:
        return [
            LayerTopology(eye.cells),
            LayerTopology(2 * eye.cells),
            LayerTopology(2),
        ]
