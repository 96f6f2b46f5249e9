"""relaynode: HTTP control plane for a single Lightning node.

The node engine (peer connections, channels, routing, chain sync, storage) is
an external collaborator reached through ``relaynode.infrastructure.NodeHandle``.
"""

__version__ = "0.1.0"
