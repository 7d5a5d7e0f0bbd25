from __future__ import annotations
from typing import Optional


class NetworthError(Exception):
    """Base class for lookup failures that end a resolution."""


class NotFound(NetworthError):
    """No matching item, or the item carries no usable net worth statement."""


class TransportFailure(NetworthError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ResolutionCancelled(NetworthError):
    """Raised when a resolution observes its own cancel token.

    Never surfaced to callers as an error state.
    """
