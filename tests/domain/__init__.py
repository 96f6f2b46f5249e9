"""Tests for domain value objects."""
