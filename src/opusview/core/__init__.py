"""Opus document model and HTML rendering engine."""
