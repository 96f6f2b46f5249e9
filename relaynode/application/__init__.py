"""Application layer: state shared by all control-plane requests."""

from .state import AppState

__all__ = ["AppState"]
