"""Shared pytest fixtures for tilewfc tests."""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import numpy as np
import pytest

from tilewfc.catalog import Side, TileCatalog, TileRule


def make_rule(
    tile_id: str,
    top: Iterable[str] = (),
    right: Iterable[str] = (),
    bottom: Iterable[str] = (),
    left: Iterable[str] = (),
    weights: Optional[Dict[Side, Dict[str, int]]] = None,
) -> TileRule:
    return TileRule(
        id=tile_id,
        adjacency={
            Side.TOP: frozenset(top),
            Side.RIGHT: frozenset(right),
            Side.BOTTOM: frozenset(bottom),
            Side.LEFT: frozenset(left),
        },
        weights=weights or {},
    )


def make_symmetric_rule(tile_id: str, friends: Iterable[str], **kwargs) -> TileRule:
    friends = tuple(friends)
    return make_rule(tile_id, friends, friends, friends, friends, **kwargs)


def write_record(directory: Path, record: dict) -> Path:
    path = directory / f"{record['id']}.json"
    path.write_text(json.dumps(record), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def restore_tilewfc_logger():
    """The CLI reconfigures the tilewfc logger; undo that between tests."""
    yield
    logger = logging.getLogger("tilewfc")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def pair_catalog() -> TileCatalog:
    """A and B may only sit next to each other horizontally."""
    return TileCatalog(
        [
            make_rule("A", right=["B"], left=["B"]),
            make_rule("B", right=["A"], left=["A"]),
        ]
    )


@pytest.fixture
def land_catalog() -> TileCatalog:
    """Grass never touches water; sand goes anywhere."""
    return TileCatalog(
        [
            make_symmetric_rule("grass", ["grass", "sand"]),
            make_symmetric_rule("sand", ["grass", "sand", "water"]),
            make_symmetric_rule("water", ["sand", "water"]),
        ]
    )


@pytest.fixture
def weighted_land_catalog() -> TileCatalog:
    """Same rules as land_catalog, grass prefers sand on its right."""
    return TileCatalog(
        [
            make_symmetric_rule(
                "grass", ["grass", "sand"], weights={Side.RIGHT: {"sand": 3}}
            ),
            make_symmetric_rule("sand", ["grass", "sand", "water"]),
            make_symmetric_rule("water", ["sand", "water"]),
        ]
    )


@pytest.fixture
def hostile_catalog() -> TileCatalog:
    """No tile tolerates any neighbour at all."""
    return TileCatalog([make_rule("A"), make_rule("B"), make_rule("C")])


@pytest.fixture
def land_records_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "tiles"
    directory.mkdir()
    write_record(
        directory,
        {
            "id": "grass",
            "color": [30, 200, 40],
            "friends_top": ["grass", "sand"],
            "friends_right": ["grass", "sand"],
            "friends_bottom": ["grass", "sand"],
            "friends_left": ["grass", "sand"],
            "weights_right": {"sand": 2},
        },
    )
    write_record(
        directory,
        {
            "id": "sand",
            "color": [230, 210, 120],
            "friends_top": ["grass", "sand", "water"],
            "friends_right": ["grass", "sand", "water"],
            "friends_bottom": ["grass", "sand", "water"],
            "friends_left": ["grass", "sand", "water"],
        },
    )
    write_record(
        directory,
        {
            "id": "water",
            "color": [20, 60, 220],
            "friends_top": ["sand", "water"],
            "friends_right": ["sand", "water"],
            "friends_bottom": ["sand", "water"],
            "friends_left": ["sand", "water"],
            "asset": "textures/water.png",
        },
    )
    return directory
