"""Tests for relaynode."""
