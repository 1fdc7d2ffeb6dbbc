"""Tile rule records as they are authored on disk, one JSON file per tile.

A record looks like:

    {"id": "grass", "color": [30, 200, 40],
     "friends_top": ["grass"], "friends_right": ["grass", "sand"],
     "friends_bottom": ["grass"], "friends_left": ["grass", "sand"],
     "weights_right": {"sand": 2}}

Weight tables and the asset reference are optional.
"""

import logging
from pathlib import Path
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError

from .catalog import CatalogError, Side, TileCatalog, TileRule

logger = logging.getLogger(__name__)

ColorComponent = Annotated[int, Field(ge=0, le=255)]


class TileRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    color: Tuple[ColorComponent, ColorComponent, ColorComponent] = (0, 0, 0)
    friends_top: Tuple[str, ...] = ()
    friends_right: Tuple[str, ...] = ()
    friends_bottom: Tuple[str, ...] = ()
    friends_left: Tuple[str, ...] = ()
    weights_top: Optional[Dict[str, NonNegativeInt]] = None
    weights_right: Optional[Dict[str, NonNegativeInt]] = None
    weights_bottom: Optional[Dict[str, NonNegativeInt]] = None
    weights_left: Optional[Dict[str, NonNegativeInt]] = None
    asset: Optional[str] = None

    def to_rule(self) -> TileRule:
        adjacency = {
            side: frozenset(getattr(self, f"friends_{side.name.lower()}"))
            for side in Side
        }
        weights = {}
        for side in Side:
            table = getattr(self, f"weights_{side.name.lower()}")
            if table is not None:
                weights[side] = dict(table)
        return TileRule(
            id=self.id,
            adjacency=adjacency,
            weights=weights,
            color=self.color,
            asset=self.asset if self.asset is not None else f"assets/{self.id}.png",
        )


def load_record(path: Path) -> TileRecord:
    try:
        return TileRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise CatalogError(f"malformed tile record {path}: {e}") from e


def load_records(directory: Path) -> List[TileRecord]:
    """Reads every *.json file in `directory`, in file name order."""
    directory = Path(directory)
    if not directory.is_dir():
        raise CatalogError(f"tile directory {directory} does not exist")
    records = [load_record(path) for path in sorted(directory.glob("*.json"))]
    logger.debug("loaded %d tile records from %s", len(records), directory)
    return records


def build_catalog(records: List[TileRecord]) -> TileCatalog:
    if len(records) == 0:
        raise CatalogError("no tile records")
    return TileCatalog(record.to_rule() for record in records)


def load_catalog(directory: Path) -> TileCatalog:
    return build_catalog(load_records(directory))
