from .catalog import CatalogError, Side, TileCatalog, TileRule, UnknownTileId
from .grid import Cell, CellSnapshot, Contradiction, Grid
from .records import TileRecord, load_catalog
from .selection import PickPolicy, weighted_draw
from .solver import GenerationFailed, GridSolver, TileCollapse, initialize
