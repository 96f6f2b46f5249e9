"""Infrastructure layer: the node engine interface and its LDK adapter."""

from .node_handle import NodeHandle

__all__ = ["NodeHandle"]
