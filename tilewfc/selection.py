from enum import Enum
from typing import List, Sequence

import numpy as np

from .catalog import TileCatalog
from .grid import Cell, Grid

PREFERENCE_GAIN = 50


class PickPolicy(Enum):
    UNIFORM = "uniform"
    WEIGHTED = "weighted"

    @classmethod
    def for_catalog(cls, catalog: TileCatalog) -> "PickPolicy":
        return cls.WEIGHTED if catalog.has_weights() else cls.UNIFORM


def uniform_pick(candidates: Sequence[str], rng: np.random.Generator) -> str:
    if len(candidates) == 0:
        raise ValueError("no candidates to pick from")
    return candidates[int(rng.integers(len(candidates)))]


def preference_score(grid: Grid, catalog: TileCatalog, cell: Cell, candidate: str) -> int:
    """Sum of the weights that collapsed neighbours give `candidate` on their
    side facing `cell`."""
    score = 0
    for neighbor, side in grid.neighbors(cell.coordinates):
        if neighbor.is_collapsed():
            score += catalog.weight(neighbor.tile(), side.opposite, candidate)
    return score


def rescale(score: int) -> int:
    return max(score * PREFERENCE_GAIN, 0) or 1


def preference_weights(
    grid: Grid, catalog: TileCatalog, cell: Cell, candidates: Sequence[str]
) -> List[int]:
    return [
        rescale(preference_score(grid, catalog, cell, candidate))
        for candidate in candidates
    ]


def weighted_draw(
    candidates: Sequence[str], weights: Sequence[int], rng: np.random.Generator
) -> str:
    """
    Draws r uniformly from [0, total) and walks the candidates subtracting
    each weight in turn; the candidate that brings the remainder to <= 0 wins.
    The boundary r == cumulative weight goes to the next candidate, so a
    zero weight is never drawn.
    """
    if len(candidates) == 0:
        raise ValueError("no candidates to pick from")
    if len(candidates) != len(weights):
        raise ValueError(
            f"{len(candidates)} candidates but {len(weights)} weights"
        )
    cumulative = np.cumsum(np.asarray(weights, dtype=np.float64))
    total = cumulative[-1]
    if total <= 0:
        raise ValueError("weights must sum to a positive total")
    r = rng.uniform(0.0, total)
    index = int(np.searchsorted(cumulative, r, side="right"))
    return candidates[min(index, len(candidates) - 1)]


def pick(
    policy: PickPolicy,
    grid: Grid,
    catalog: TileCatalog,
    cell: Cell,
    rng: np.random.Generator,
) -> str:
    candidates = cell.candidates()
    if policy is PickPolicy.UNIFORM:
        return uniform_pick(candidates, rng)
    return weighted_draw(
        candidates, preference_weights(grid, catalog, cell, candidates), rng
    )
