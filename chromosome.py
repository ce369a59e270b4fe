"""
Chromosome for EvoForage.

A chromosome is the flat, fixed-length vector of real-valued genes that
the genetic algorithm operates on and that a Brain encodes to / decodes
from. It is the only exchange format between the two.
"""

import numpy as np


class Chromosome:
    """
    Owned fixed-length buffer of float genes.

    Genes can be read and overwritten in place, but the buffer can never
    grow or shrink once built.
    """
    __slots__ = ("_genes",)

    def __init__(self, genes):
        arr = np.array(list(genes), dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError(f"chromosome must be one-dimensional, got shape {arr.shape}")
        self._genes = arr

    # ──────────────────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._genes)

    def __getitem__(self, index: int) -> float:
        return float(self._genes[index])

    def __setitem__(self, index: int, value: float):
        self._genes[index] = value

    def __iter__(self):
        for gene in self._genes:
            yield float(gene)

    def __eq__(self, other) -> bool:
        if isinstance(other, Chromosome):
            other = other._genes
        try:
            other = np.asarray(other, dtype=np.float64)
        except (TypeError, ValueError):
            return NotImplemented
        return other.shape == self._genes.shape and bool(np.all(other == self._genes))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Chromosome({self._genes.tolist()!r})"

    # ──────────────────────────────────────────────────────────────────────────

    @property
    def genes(self) -> np.ndarray:
        """Read-only view of the gene buffer."""
        view = self._genes.view()
        view.flags.writeable = False
        return view
