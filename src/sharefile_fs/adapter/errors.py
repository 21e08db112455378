"""Adapter error hierarchy.

These are raised internally when a precondition fails and are converted to
negative results (None / False) at the public adapter methods.
"""


class SharefileAdapterError(Exception):
    """Base class for adapter precondition failures."""


class ItemNotFoundError(SharefileAdapterError):
    """Raised when a path does not resolve to a file or folder."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No file or folder at path: {path}")
        self.path = path


class AccessDeniedError(SharefileAdapterError):
    """Raised when an item does not grant the requested capability."""

    def __init__(self, path: str, capability: str) -> None:
        super().__init__(f"Access denied for {capability} on path: {path}")
        self.path = path
        self.capability = capability


class VisibilityNotSupportedError(SharefileAdapterError):
    """ShareFile items have no public/private visibility."""
