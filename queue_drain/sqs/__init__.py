"""Source queue operations: pulling a batch and purging it."""

from .puller import Puller
from .purger import Purger

__all__ = ["Puller", "Purger"]
