"""Tests for the node engine adapter."""
