"""Command implementations for deploywait."""
