"""
Resolved versions and hashes for gitpins.

These are the values a pin produces: `update` yields a version
(GitRevision or GenericVersion), `fetch` yields a hash bundle
(OptionalUrlHashes or ReleasePinHashes). They are immutable; a new
resolution creates new instances.
"""

import re
from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple

from ..exit_codes import InvalidConfigurationError

NOT_AVAILABLE = "N/A"

_REVISION_RE = re.compile(r"^[0-9a-fA-F]{40}$")


def validate_revision(revision: str) -> str:
    """Return the revision unchanged if it is a 40 character sha1 hash."""
    if not isinstance(revision, str) or not _REVISION_RE.match(revision):
        raise InvalidConfigurationError(
            f"'{revision}' is not a valid git revision (sha1 hash)"
        )
    return revision


@dataclass(frozen=True)
class GitRevision:
    """A git revision, with an optional timestamp.

    Timestamps are supported for GitHub repositories only.
    """
    revision: str
    timestamp: Optional[str] = None

    def __post_init__(self):
        validate_revision(self.revision)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("revision", self.revision),
            ("timestamp", self.timestamp or NOT_AVAILABLE),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {'revision': self.revision, 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitRevision':
        return cls(revision=data['revision'], timestamp=data.get('timestamp'))


@dataclass(frozen=True)
class GenericVersion:
    """An opaque version string, e.g. a release tag."""
    version: str

    def properties(self) -> List[Tuple[str, str]]:
        return [("version", self.version)]

    def to_dict(self) -> Dict[str, Any]:
        return {'version': self.version}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenericVersion':
        return cls(version=data['version'])

    def __str__(self) -> str:
        return self.version


@dataclass(frozen=True)
class OptionalUrlHashes:
    """A hash, but the URL is optional.

    If the url is not present, the hash was computed over a full git
    checkout and must be fetched that way again.
    """
    hash: str
    url: Optional[str] = None

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("url", self.url or NOT_AVAILABLE),
            ("hash", self.hash),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'hash': self.hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptionalUrlHashes':
        return cls(hash=data['hash'], url=data.get('url'))


@dataclass(frozen=True)
class ReleasePinHashes:
    """Revision behind a release tag, with the tarball URL (if any) and hash."""
    revision: str
    hash: str
    url: Optional[str] = None

    def __post_init__(self):
        validate_revision(self.revision)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("revision", self.revision),
            ("url", self.url or NOT_AVAILABLE),
            ("hash", self.hash),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {'revision': self.revision, 'url': self.url, 'hash': self.hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReleasePinHashes':
        return cls(revision=data['revision'], hash=data['hash'], url=data.get('url'))
