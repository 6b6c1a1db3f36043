"""Base exception shared by kubeball modules."""


class KubeballError(Exception):
    """Base class for errors reported to the user."""
