"""Domain layer — account configuration, naming rules, and outcomes.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, output, or config.
"""
