"""Integrations with external services."""

from integrations.github_releases import ReleaseResolver

__all__ = [
    "ReleaseResolver",
]
