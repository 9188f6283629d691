"""Drain workflow services."""

from .dispatcher import Dispatcher
from .pipeline import DrainPipeline

__all__ = ["Dispatcher", "DrainPipeline"]
