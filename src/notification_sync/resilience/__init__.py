"""Resilience – delay strategies for reconnect loops."""
