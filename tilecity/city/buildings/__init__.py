from .footprints import FootprintOption, get_default_footprints
from .placement import Lot, Placement

__all__ = ["FootprintOption", "Lot", "Placement", "get_default_footprints"]
