"""
Exceptions shared across pipeline stages.

"No document detected" is never an exception: detection returns a
``QuadNotFound`` value instead. The errors below signal programmer errors
or aborted work.
"""


class InvalidQuadError(ValueError):
    """
    A degenerate quadrilateral (collinear, zero-area or self-intersecting)
    reached the rectifier.

    Detected quads are non-degenerate by construction, so this indicates an
    invariant breach in the detector or in caller-constructed input.
    """


class FrameSupersededError(RuntimeError):
    """A live-preview run was abandoned because a newer frame arrived."""
