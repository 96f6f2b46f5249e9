"""Tests for the control-plane HTTP API."""
