import logging
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .catalog import Side, TileCatalog
from .grid import Cell, Coordinates, Grid
from .selection import PickPolicy, pick

logger = logging.getLogger(__name__)


class GenerationFailed(Exception):
    pass


def initialize(catalog: TileCatalog, width: int, height: int) -> Grid:
    return Grid(width, height, catalog.all_ids())


class GridSolver:
    """
    Advances a grid one collapse at a time:
    1. pick the undecided cell with the fewest candidates
    2. collapse it to one candidate chosen by the pick policy
    3. propagate the adjacency constraints outward from it
    Contradictions are recorded and left in place, there is no backtracking.
    """

    def __init__(
        self,
        grid: Grid,
        catalog: TileCatalog,
        rng: Optional[np.random.Generator] = None,
        policy: Optional[PickPolicy] = None,
    ) -> None:
        self.grid = grid
        self.catalog = catalog
        self.rng = rng if rng is not None else np.random.default_rng()
        self.policy = policy if policy is not None else PickPolicy.for_catalog(catalog)
        # cells emptied by propagation since the last reset
        self.contradictions: List[Coordinates] = []

    def step(self) -> bool:
        cell = self.grid.minimum_remaining_values_cell()
        if cell is None:
            return False
        tile_id = pick(self.policy, self.grid, self.catalog, cell, self.rng)
        logger.debug(
            "collapsing %s to %r out of %d candidates",
            cell.coordinates,
            tile_id,
            len(cell.domain),
        )
        cell.collapse(tile_id)
        self.propagate(cell)
        return True

    def _enter(self, cell: Cell) -> Tuple[FrozenSet[str], Iterator[Tuple[Cell, Side]]]:
        """A propagation frame: the domain of `cell` and its undecided
        neighbours, both taken when the cell is entered."""
        undecided = [
            (neighbor, side)
            for neighbor, side in self.grid.neighbors(cell.coordinates)
            if neighbor.is_undecided()
        ]
        return cell.domain, iter(undecided)

    def propagate(self, source: Cell) -> None:
        """
        Starting from a cell whose domain just shrank, narrow each neighbour
        that was undecided on entry to the ids the source allows on that side,
        descending into every neighbour that shrank before moving on to the
        next one. A neighbour collapsed by a deeper branch in the meantime is
        still narrowed, so a clash with it empties it instead of going
        unnoticed. A neighbour that did not shrink is not entered, so this
        stops at a fixed point.
        """
        propagation_stack = [self._enter(source)]
        while len(propagation_stack) > 0:
            domain, pending = propagation_stack[-1]
            visit = next(pending, None)
            if visit is None:
                propagation_stack.pop()
                continue
            neighbor, side = visit
            allowed = self.catalog.allowed_neighbors(domain, side)
            if neighbor.restrict(allowed):
                if neighbor.is_contradiction():
                    logger.warning(
                        "contradiction at %s, no tile fits", neighbor.coordinates
                    )
                    self.contradictions.append(neighbor.coordinates)
                propagation_stack.append(self._enter(neighbor))

    def solve_fully(self) -> int:
        """Steps until no cell is left undecided. Returns the number of
        collapses made."""
        steps = 0
        while self.step():
            steps += 1
        return steps

    def reset(self, all_ids: Optional[Iterable[str]] = None) -> None:
        self.grid.reset(all_ids if all_ids is not None else self.catalog.all_ids())
        self.contradictions = []


class TileCollapse:
    """Runs full generations, restarting from a reset grid whenever a run
    hits a contradiction. Does no I/O."""

    def __init__(
        self,
        catalog: TileCatalog,
        rng: Optional[np.random.Generator] = None,
        policy: Optional[PickPolicy] = None,
    ) -> None:
        self.catalog = catalog
        self.rng = rng if rng is not None else np.random.default_rng()
        self.policy = policy

    def run(self, width: int, height: int, trials: int = 10) -> Grid:
        if trials < 1:
            raise ValueError(f"trials must be at least 1, got {trials}")
        grid = initialize(self.catalog, width, height)
        solver = GridSolver(grid, self.catalog, self.rng, self.policy)
        for attempt in range(1, trials + 1):
            solver.reset()
            while solver.step():
                if len(solver.contradictions) > 0:
                    break
                logger.debug("%.1f%% done", grid.current_progress() * 100.0)
            if len(solver.contradictions) == 0:
                logger.info("generated %dx%d grid on attempt %d", width, height, attempt)
                return grid
            logger.info(
                "attempt %d/%d ran into a contradiction at %s",
                attempt,
                trials,
                solver.contradictions[0],
            )
        raise GenerationFailed(f"ran into {trials} contradictions in a row")
