"""Domain layer: records, lookups, formatters, and row structures.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
