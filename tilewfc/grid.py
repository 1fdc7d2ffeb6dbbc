import itertools
from dataclasses import dataclass
from typing import FrozenSet, Generator, Iterable, List, Optional, Tuple

import networkx as nx

from .catalog import Side

Coordinates = Tuple[int, int]

# neighbour visiting order used by propagation
NEIGHBOR_ORDER = (Side.LEFT, Side.RIGHT, Side.TOP, Side.BOTTOM)


class Contradiction(Exception):
    pass


@dataclass
class Cell:
    coordinates: Coordinates
    domain: FrozenSet[str]

    def is_collapsed(self) -> bool:
        return len(self.domain) == 1

    def is_contradiction(self) -> bool:
        return len(self.domain) == 0

    def is_undecided(self) -> bool:
        return len(self.domain) > 1

    def tile(self) -> str:
        """The id this cell collapsed to."""
        assert self.is_collapsed(), f"cell {self.coordinates} is not collapsed"
        return next(iter(self.domain))

    def candidates(self) -> List[str]:
        return sorted(self.domain)

    def collapse(self, tile_id: str) -> None:
        assert tile_id in self.domain, f"{tile_id!r} not possible at {self.coordinates}"
        self.domain = frozenset((tile_id,))

    def restrict(self, allowed: FrozenSet[str]) -> bool:
        """Keep only the allowed ids. Returns whether the domain shrank."""
        narrowed = self.domain & allowed
        if len(narrowed) == len(self.domain):
            return False
        self.domain = narrowed
        return True


@dataclass(frozen=True)
class CellSnapshot:
    coordinates: Coordinates
    tile_ids: Tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.tile_ids)


class Grid:
    """
    A width x height arrangement of cells, each holding the ids still possible
    there. Cells live as node data in a directed graph keyed by (x, y); an
    edge a -> b carries the side of a on which b lies. Nodes are added
    row-major and edges in left, right, top, bottom order, so iteration over
    either is reproducible.
    """

    def __init__(self, width: int, height: int, all_ids: Iterable[str]) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.all_ids = frozenset(all_ids)
        if len(self.all_ids) == 0:
            raise ValueError("grid needs at least one tile id")
        self.cells = nx.DiGraph()
        self._make_cell_graph()

    def _make_cell_graph(self) -> None:
        for y, x in itertools.product(range(self.height), range(self.width)):
            self.cells.add_node((x, y), cell=Cell((x, y), self.all_ids))
        for y, x in itertools.product(range(self.height), range(self.width)):
            for side in NEIGHBOR_ORDER:
                dx, dy = side.offset
                neighbor = (x + dx, y + dy)
                if 0 <= neighbor[0] < self.width and 0 <= neighbor[1] < self.height:
                    self.cells.add_edge((x, y), neighbor, side=side)

    def cell(self, x: int, y: int) -> Cell:
        return self.cells.nodes[(x, y)]["cell"]

    def get_cells(self) -> Generator[Cell, None, None]:
        """All cells in row-major order."""
        for _, cell in self.cells.nodes.data("cell"):  # type: ignore
            yield cell

    def neighbors(
        self, coordinates: Coordinates
    ) -> Generator[Tuple[Cell, Side], None, None]:
        for neighbor_coord, edge in self.cells.adj[coordinates].items():
            yield self.cells.nodes[neighbor_coord]["cell"], edge["side"]

    def minimum_remaining_values_cell(self) -> Optional[Cell]:
        """The undecided cell with the fewest candidates, first in row-major
        order on ties. None once no cell has more than one candidate."""
        best: Optional[Cell] = None
        for cell in self.get_cells():
            if cell.is_undecided() and (best is None or len(cell.domain) < len(best.domain)):
                best = cell
        return best

    def reset(self, all_ids: Optional[Iterable[str]] = None) -> None:
        if all_ids is not None:
            self.all_ids = frozenset(all_ids)
        for cell in self.get_cells():
            cell.domain = self.all_ids

    def snapshot(self) -> List[List[CellSnapshot]]:
        """Per-row views of every cell's candidates, for display."""
        rows: List[List[CellSnapshot]] = [[] for _ in range(self.height)]
        for cell in self.get_cells():
            rows[cell.coordinates[1]].append(
                CellSnapshot(cell.coordinates, tuple(cell.candidates()))
            )
        return rows

    def contradictions(self) -> List[Coordinates]:
        return [cell.coordinates for cell in self.get_cells() if cell.is_contradiction()]

    def has_contradiction(self) -> bool:
        return any(cell.is_contradiction() for cell in self.get_cells())

    def check(self) -> None:
        """Raises Contradiction if any cell ran out of candidates."""
        empty = self.contradictions()
        if len(empty) > 0:
            raise Contradiction(f"cells with zero possibilities found: {empty}")

    def is_fully_collapsed(self) -> bool:
        return all(cell.is_collapsed() for cell in self.get_cells())

    def current_progress(self) -> float:
        decided = len([cell for cell in self.get_cells() if not cell.is_undecided()])
        return decided / (self.width * self.height)
