"""Shared building blocks: enums, errors, ids, clock and settings."""
