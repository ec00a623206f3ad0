"""Hummingbird foraging environment."""
