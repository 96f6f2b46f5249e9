"""Domain layer for the node control plane.

Value objects and enums projected from the node engine's state.
"""
