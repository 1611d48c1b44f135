"""
Exception hierarchy for DSVEdit.
"""


class DSVEditError(Exception):
    """Base class for all editor errors."""
    pass


class TilesetMaterializationError(DSVEditError):
    """Raised when a tileset raster is missing or unreadable right after rendering."""
    pass


class TMXFormatError(DSVEditError):
    """Raised when a TMX document cannot be applied to a room."""
    pass


class StoreError(DSVEditError):
    """Raised when the record store cannot provide or persist level data."""
    pass


class UnknownGameError(DSVEditError):
    """Raised when a header does not carry a known game signature."""
    pass
