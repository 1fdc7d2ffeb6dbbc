import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class Side(Enum):
    """Orthogonal sides of a cell. Values are (dx, dy) grid offsets, y grows
    downward."""

    TOP = (0, -1)
    RIGHT = (1, 0)
    BOTTOM = (0, 1)
    LEFT = (-1, 0)

    @property
    def offset(self) -> Tuple[int, int]:
        return self.value

    @property
    def opposite(self) -> "Side":
        dx, dy = self.value
        return Side((-dx, -dy))


class UnknownTileId(LookupError):
    def __init__(self, tile_id: str) -> None:
        super().__init__(f"unknown tile id {tile_id!r}")
        self.tile_id = tile_id


class CatalogError(ValueError):
    pass


def _empty_adjacency() -> Dict[Side, FrozenSet[str]]:
    return {side: frozenset() for side in Side}


@dataclass(frozen=True)
class TileRule:
    id: str
    adjacency: Mapping[Side, FrozenSet[str]] = field(
        default_factory=_empty_adjacency, compare=False
    )
    # sides without a weight table are simply missing from the mapping
    weights: Mapping[Side, Mapping[str, int]] = field(
        default_factory=dict, compare=False
    )
    color: Tuple[int, int, int] = field(default=(0, 0, 0), compare=False)
    asset: Optional[str] = field(default=None, compare=False)

    def allowed(self, side: Side) -> FrozenSet[str]:
        return self.adjacency.get(side, frozenset())

    def weight(self, side: Side, neighbor_id: str) -> int:
        return self.weights.get(side, {}).get(neighbor_id, 0)

    def __lt__(self, other: "TileRule") -> bool:
        return self.id < other.id


class TileCatalog:
    """Immutable collection of tile rules keyed by id. Every id referenced by
    an adjacency list or weight table must itself be a rule of the catalog,
    so that any id a grid ever holds can be looked up."""

    def __init__(self, rules: Iterable[TileRule]) -> None:
        self._rules: Dict[str, TileRule] = {}
        for rule in rules:
            if rule.id in self._rules:
                logger.warning("duplicate tile id %r overwrites earlier rule", rule.id)
            self._rules[rule.id] = rule
        self._all_ids = frozenset(self._rules)
        self._validate()
        logger.debug("catalog built with %d tiles", len(self._rules))

    def _validate(self) -> None:
        for rule in self._rules.values():
            for allowed in rule.adjacency.values():
                for tile_id in allowed:
                    if tile_id not in self._rules:
                        raise UnknownTileId(tile_id)
            for side, table in rule.weights.items():
                for tile_id, weight in table.items():
                    if tile_id not in self._rules:
                        raise UnknownTileId(tile_id)
                    if weight < 0:
                        raise CatalogError(
                            f"tile {rule.id!r} has negative {side.name.lower()} "
                            f"weight {weight} for {tile_id!r}"
                        )

    def lookup(self, tile_id: str) -> TileRule:
        try:
            return self._rules[tile_id]
        except KeyError:
            raise UnknownTileId(tile_id) from None

    def all_ids(self) -> FrozenSet[str]:
        return self._all_ids

    def has_weights(self) -> bool:
        return any(rule.weights for rule in self._rules.values())

    def allowed_neighbors(self, tile_ids: Iterable[str], side: Side) -> FrozenSet[str]:
        """Union of the ids permitted on `side` of any of `tile_ids`."""
        return frozenset(
            allowed_id
            for tile_id in tile_ids
            for allowed_id in self.lookup(tile_id).allowed(side)
        )

    def weight(self, tile_id: str, side: Side, neighbor_id: str) -> int:
        return self.lookup(tile_id).weight(side, neighbor_id)

    def __contains__(self, tile_id: object) -> bool:
        return tile_id in self._rules

    def __iter__(self) -> Iterator[TileRule]:
        return iter(sorted(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)
