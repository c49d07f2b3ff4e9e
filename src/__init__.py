"""smelltrack: content-addressed smell cache with workspace reconciliation."""

from smelltrack.version import __version__

__all__ = ["__version__"]
