"""Module for reporting episode results."""
