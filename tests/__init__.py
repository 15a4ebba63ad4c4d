"""Test suite for tap-notion-cdc."""
