"""Custom exception hierarchy for slabframe."""


class SlabFrameError(Exception):
    """Base exception for all slabframe errors."""


class InvalidParamsError(SlabFrameError):
    """Bad user input (maps to HTTP 400)."""


class GeometryError(SlabFrameError):
    """Malformed or degenerate geometry (maps to HTTP 500)."""


class HostOperationError(SlabFrameError):
    """Failure surfaced from the host model (element creation, parameters)."""


class PreconditionError(HostOperationError):
    """Host state that makes the whole batch impossible (maps to HTTP 400)."""
