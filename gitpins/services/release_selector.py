"""
Release selection for gitpins.

Pure logic, no I/O: given the tag names of a repository, pick the latest
release that satisfies a pin's filters.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from ..domain.semver import LenientVersion, try_parse_version


@dataclass(frozen=True)
class LatestRelease:
    """The selected release."""
    # The tag as used by git, e.g. release/2.0
    tag: str
    # The tag as communicated to the user, e.g. 2.0
    name: str


def _strip_prefix(tags: Iterable[str], prefix: Optional[str]) -> Iterator[str]:
    if prefix is None:
        yield from tags
        return
    for tag in tags:
        if tag.startswith(prefix):
            yield tag[len(prefix):]


def _candidates(
    tags: Iterable[str],
    pre_releases: bool,
    version_upper_bound: Optional[LenientVersion],
    prefix: Optional[str],
) -> Iterator[Tuple[str, LenientVersion]]:
    for tag in _strip_prefix(tags, prefix):
        # Not every tag is a release
        version = try_parse_version(tag)
        if version is None:
            continue
        if not pre_releases and version.is_pre_release:
            continue
        if version_upper_bound is not None and not version < version_upper_bound:
            continue
        yield tag, version


def latest_release(
    tags: Iterable[str],
    pre_releases: bool = False,
    version_upper_bound: Optional[LenientVersion] = None,
    prefix: Optional[str] = None,
) -> Optional[LatestRelease]:
    """
    Take an iterable of tags and return the latest release.

    Args:
        tags: Tag names, without the "refs/tags/" prefix
        pre_releases: Also consider pre-release versions
        version_upper_bound: Only consider versions strictly lower than this
        prefix: Only consider tags starting with this, compared with it stripped

    Returns:
        LatestRelease, or None if no tag qualifies. When several tags compare
        equal (e.g. "1.0" and "v1.0.0") any one of them may be returned.
    """
    best = max(
        _candidates(tags, pre_releases, version_upper_bound, prefix),
        key=lambda candidate: candidate[1],
        default=None,
    )
    if best is None:
        return None

    name = best[0]
    return LatestRelease(
        tag=f"{prefix}{name}" if prefix is not None else name,
        name=name,
    )
