"""
Service layer for gitpins.

Contains the decision logic that sits between the domain objects and the
pins:
- latest_release: pick the newest tag satisfying a release pin's filters
"""

from .release_selector import LatestRelease, latest_release

__all__ = [
    'LatestRelease',
    'latest_release',
]
