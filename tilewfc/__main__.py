import json
import pathlib
import sys
from typing import List, Literal, Optional

import numpy as np
from tap import Tap

from .catalog import CatalogError, UnknownTileId
from .grid import Grid
from .logging_config import setup_logging
from .records import load_catalog
from .selection import PickPolicy
from .solver import GenerationFailed, GridSolver, TileCollapse, initialize


class TileCollapseParser(Tap):
    tiles: pathlib.Path = pathlib.Path("tiles")  # directory of tile JSON records
    width: int = 9
    height: int = 9
    seed: Optional[int] = None
    policy: Literal["auto", "uniform", "weighted"] = "auto"
    trials: int = 10  # restarts allowed after a contradiction
    steps: Optional[int] = None  # advance only this many steps, no restarts
    output: Optional[pathlib.Path] = None  # write the grid snapshot as JSON
    log_level: str = "INFO"
    log_file: Optional[pathlib.Path] = None


def format_grid(grid: Grid) -> str:
    lines = []
    for row in grid.snapshot():
        labels = []
        for view in row:
            if view.count == 1:
                labels.append(view.tile_ids[0])
            elif view.count == 0:
                labels.append("!")
            else:
                labels.append(f"?{view.count}")
        lines.append(" ".join(labels))
    return "\n".join(lines)


def snapshot_json(grid: Grid) -> str:
    return json.dumps(
        [[list(view.tile_ids) for view in row] for row in grid.snapshot()], indent=2
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = TileCollapseParser().parse_args(argv)
    logger = setup_logging(args.log_level.upper(), args.log_file)
    logger.info("Running with args %s", args)

    try:
        catalog = load_catalog(args.tiles)
    except (CatalogError, UnknownTileId) as e:
        logger.error("could not build tile catalog: %s", e)
        return 1

    rng = np.random.default_rng(args.seed)
    policy = None if args.policy == "auto" else PickPolicy(args.policy)

    if args.steps is not None:
        grid = initialize(catalog, args.width, args.height)
        solver = GridSolver(grid, catalog, rng, policy)
        for _ in range(args.steps):
            if not solver.step():
                break
        if len(solver.contradictions) > 0:
            logger.warning("grid has contradictions at %s", solver.contradictions)
    else:
        try:
            grid = TileCollapse(catalog, rng, policy).run(
                args.width, args.height, trials=args.trials
            )
        except GenerationFailed as e:
            logger.error("%s", e)
            return 1

    print(format_grid(grid))
    if args.output is not None:
        args.output.write_text(snapshot_json(grid), encoding="utf-8")
    return 0


if __name__ == "__main__":
    sys.exit(main())
