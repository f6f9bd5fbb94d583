"""Exception hierarchy for label synthesis."""


class LabelError(Exception):
    """Base class for all label generation errors."""


class InvalidRequestError(LabelError, ValueError):
    """A label request carried a value outside its allowed set."""


class GeometryError(LabelError):
    """Boolean subtraction could not produce a valid manifold solid."""


class ValidationError(LabelError):
    """A serialized mesh buffer failed the export sanity checks."""

    def __init__(self, message: str, width: float = 0.0, height: float = 0.0,
                 depth: float = 0.0, triangle_count: int = 0):
        super().__init__(message)
        self.width = width
        self.height = height
        self.depth = depth
        self.triangle_count = triangle_count


class STLLoadError(LabelError):
    """An STL file could not be read or parsed."""
