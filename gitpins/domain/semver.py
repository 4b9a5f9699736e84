"""
Lenient semantic versions for gitpins.

Release tags in the wild only loosely follow SemVer: "v1.2", "2.0-pre",
"1.2.3.4", "2.1b1" and "1.0.0-rc.1+build.5" all show up. Parsing and
ordering is done by `packaging.version.Version`; SemVer pre-release
spellings it rejects (e.g. "1.0-foo", "1.0.0-alpha.beta") are normalised
to a development release of the same numbers.
"""

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional, Tuple

from packaging.version import Version, InvalidVersion


# SemVer shapes that PEP 440 does not know. ASCII digits only.
_SEMVER_FALLBACK_RE = re.compile(
    r"""
    ^\s*
    [vV]?
    (?P<release>[0-9]+(?:\.[0-9]+)*)
    (?:[-.]?(?P<pre>[A-Za-z][0-9A-Za-z.-]*))?
    (?:\+(?P<build>[0-9A-Za-z][0-9A-Za-z.-]*))?
    \s*$
    """,
    re.VERBOSE,
)


class InvalidVersionError(ValueError):
    """Raised when a string cannot be read as a lenient version."""


def _fallback_version(text: str) -> Tuple[Version, Optional[str]]:
    """
    Map a SemVer-only spelling onto a PEP 440 version.

    Unknown pre-release labels become `<release>.dev<N>`, with N the last
    numeric identifier (0 if there is none), so they still sort below the
    release itself.
    """
    match = _SEMVER_FALLBACK_RE.match(text)
    if not match:
        raise InvalidVersionError(f"'{text}' is not a valid version")

    release = match.group('release')
    pre = match.group('pre')
    if not pre:
        # Only the build part was rejected
        return Version(release), match.group('build')

    identifiers = pre.split('.')
    if any(not identifier for identifier in identifiers):
        raise InvalidVersionError(f"'{text}' has an empty pre-release identifier")
    numbers = [int(identifier) for identifier in identifiers if identifier.isdigit()]
    dev = numbers[-1] if numbers else 0
    return Version(f"{release}.dev{dev}"), match.group('build')


@total_ordering
@dataclass(frozen=True, eq=False)
class LenientVersion:
    """
    A release version, parsed as leniently as tags demand.

    Ordering is that of PEP 440 on the public version: trailing zero
    components do not matter, pre-releases sort below their release, and
    build metadata ("+build.5") is kept but ignored.

    Example:
        >>> LenientVersion.parse("v2.0-pre").is_pre_release
        True
        >>> LenientVersion.parse("1.10") > LenientVersion.parse("1.9")
        True
    """
    version: Version
    build: Optional[str] = None
    raw: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> 'LenientVersion':
        """
        Parse a version string.

        Raises:
            InvalidVersionError: if the text is not a version
        """
        try:
            parsed = Version(text)
            version, build = Version(parsed.public), parsed.local
        except InvalidVersion:
            version, build = _fallback_version(text)
        return cls(version=version, build=build, raw=text)

    @property
    def release(self) -> Tuple[int, ...]:
        return self.version.release

    @property
    def is_pre_release(self) -> bool:
        return self.version.is_prerelease

    def __eq__(self, other):
        if not isinstance(other, LenientVersion):
            return NotImplemented
        return self.version == other.version

    def __lt__(self, other):
        if not isinstance(other, LenientVersion):
            return NotImplemented
        return self.version < other.version

    def __hash__(self):
        return hash(self.version)

    def __str__(self) -> str:
        if self.build:
            return f"{self.version}+{self.build}"
        return str(self.version)


def parse_version(text: str) -> LenientVersion:
    """Shortcut for LenientVersion.parse."""
    return LenientVersion.parse(text)


def try_parse_version(text: str) -> Optional[LenientVersion]:
    """Parse a version, returning None instead of raising."""
    try:
        return LenientVersion.parse(text)
    except InvalidVersionError:
        return None
