"""
Pin a git repository.

Either a branch or a release can be tracked. Releases are git tags that
more or less follow SemVer (see domain.semver).

Every pin goes through the same two steps:

    version = await pin.update(old_version)   # what is the newest version?
    hashes = await pin.fetch(version)         # what does it hash to?

Repositories hosted on GitHub, GitLab or Forgejo get tarball URLs, which
are faster to hash than a clone; plain git repositories and pins that
track submodules are hashed as full checkouts.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from .domain.repository import Repository
from .domain.semver import InvalidVersionError, LenientVersion, try_parse_version
from .domain.version import (
    NOT_AVAILABLE,
    GenericVersion,
    GitRevision,
    OptionalUrlHashes,
    ReleasePinHashes,
)
from .exit_codes import InvalidConfigurationError, MonotonicityError, NoMatchingReleaseError
from .infra.git_client import GitRemoteClient
from .infra.github_client import GitHubClient
from .infra.prefetch import NixPrefetcher, Prefetcher
from .services.release_selector import latest_release

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"

V = TypeVar('V')
H = TypeVar('H')


class Updatable(ABC, Generic[V, H]):
    """The lifecycle shared by all pin kinds."""

    @abstractmethod
    async def update(self, old: Optional[V] = None) -> V:
        """Resolve the version this pin should now point to."""

    @abstractmethod
    async def fetch(self, version: V) -> H:
        """Compute the hashes for a version returned by `update`."""

    @abstractmethod
    def properties(self) -> List[Tuple[str, str]]:
        """Human readable (label, value) pairs describing the pin."""


class _RepositoryPin:
    """Collaborator lookup shared by the git pin kinds."""

    repository: Repository
    submodules: bool
    remote: Optional[GitRemoteClient]
    prefetcher: Optional[Prefetcher]

    def _remote(self) -> GitRemoteClient:
        return self.remote if self.remote is not None else GitRemoteClient()

    def _prefetcher(self) -> Prefetcher:
        return self.prefetcher if self.prefetcher is not None else NixPrefetcher()

    async def _hash(self, revision: str, archive_url: Optional[str]) -> Tuple[Optional[str], str]:
        """
        Hash a tarball if there is one, otherwise a full checkout.

        Tarballs do not carry submodules, so tracking them always means a
        checkout.
        """
        prefetcher = self._prefetcher()
        if self.submodules or archive_url is None:
            hash_ = await prefetcher.hash_of_git_checkout(
                self.repository.clone_url(), revision, self.submodules
            )
            return None, hash_
        return archive_url, await prefetcher.hash_of_tarball(archive_url)


@dataclass(frozen=True)
class GitPin(_RepositoryPin, Updatable[GitRevision, OptionalUrlHashes]):
    """Track a given branch on a repository and always use the latest commit."""
    repository: Repository
    branch: str
    # Also fetch submodules
    submodules: bool = False
    remote: Optional[GitRemoteClient] = field(default=None, compare=False, repr=False)
    prefetcher: Optional[Prefetcher] = field(default=None, compare=False, repr=False)
    github: Optional[GitHubClient] = field(default=None, compare=False, repr=False)

    async def update(self, old: Optional[GitRevision] = None) -> GitRevision:
        latest = await self._remote().branch_head(self.repository.clone_url(), self.branch)
        timestamp = await self.repository.commit_timestamp(latest.revision, client=self.github)
        return GitRevision(revision=latest.revision, timestamp=timestamp)

    async def fetch(self, version: GitRevision) -> OptionalUrlHashes:
        archive_url = None if self.submodules else self.repository.archive_url(version.revision)
        url, hash_ = await self._hash(version.revision, archive_url)
        return OptionalUrlHashes(hash=hash_, url=url)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("repository", self.repository.display_url()),
            ("branch", self.branch),
            ("submodules", str(self.submodules).lower()),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'Git',
            'repository': self.repository.to_dict(),
            'branch': self.branch,
            'submodules': self.submodules,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **collaborators) -> 'GitPin':
        return cls(
            repository=Repository.from_dict(data['repository']),
            branch=data['branch'],
            submodules=data.get('submodules', False),
            **collaborators,
        )


@dataclass(frozen=True)
class GitReleasePin(_RepositoryPin, Updatable[GenericVersion, ReleasePinHashes]):
    """
    Try to follow the latest release of the given project.

    `version_upper_bound` optionally restricts the pin to older releases,
    e.g. set it to "2.0" to track 1.* releases. The bound is exclusive: it
    is the infimum, not a maximum, since the set of compatible releases has
    no greatest element. It is parsed as leniently as the tags themselves.

    `release_prefix` filters tags such as "release/2.0": only tags with the
    prefix are considered, and the prefix is stripped before comparing.
    Versions returned by `update` do not carry the prefix.
    """
    repository: Repository
    # Also track pre-releases
    pre_releases: bool = False
    version_upper_bound: Optional[str] = None
    release_prefix: Optional[str] = None
    # Also fetch submodules
    submodules: bool = False
    remote: Optional[GitRemoteClient] = field(default=None, compare=False, repr=False)
    prefetcher: Optional[Prefetcher] = field(default=None, compare=False, repr=False)

    def parsed_upper_bound(self) -> Optional[LenientVersion]:
        if self.version_upper_bound is None:
            return None
        try:
            return LenientVersion.parse(self.version_upper_bound)
        except InvalidVersionError as e:
            raise InvalidConfigurationError(
                f"Field `version_upper_bound` is invalid: {e}"
            ) from e

    def tag_for(self, version: str) -> str:
        """
        The git tag behind a version returned by `update`.

        Values recorded with the prefix still attached are used as they are.
        """
        prefix = self.release_prefix
        if prefix and not version.startswith(prefix):
            return f"{prefix}{version}"
        return version

    def _strip_release_prefix(self, version: str) -> str:
        prefix = self.release_prefix
        if prefix and version.startswith(prefix):
            return version[len(prefix):]
        return version

    async def update(self, old: Optional[GenericVersion] = None) -> GenericVersion:
        version_upper_bound = self.parsed_upper_bound()

        tags = await self._remote().list_tags(self.repository.clone_url())
        tag_names = [
            info.ref[len(TAG_REF_PREFIX):]
            for info in tags
            # Everything listed under refs/tags/* carries the prefix
            if info.ref.startswith(TAG_REF_PREFIX)
        ]

        latest = latest_release(
            tag_names,
            pre_releases=self.pre_releases,
            version_upper_bound=version_upper_bound,
            prefix=self.release_prefix,
        )
        if latest is None:
            raise NoMatchingReleaseError()

        if old is not None:
            self._check_monotonicity(old.version, latest.name)

        return GenericVersion(version=latest.name)

    def _check_monotonicity(self, old: str, latest: str) -> None:
        current = self._strip_release_prefix(old)
        # The selector only returns tags that parse
        latest_version = LenientVersion.parse(latest)
        current_version = try_parse_version(current)

        if current_version is None:
            logger.warning(
                f"Old version ({old}) failed to parse as SemVer, cannot ensure monotonicity"
            )
            return

        if latest_version < current_version:
            raise MonotonicityError(
                "Failed to ensure version monotonicity, "
                f"latest found version is {latest} but current is {current}",
                latest=latest,
                current=current,
            )

    async def fetch(self, version: GenericVersion) -> ReleasePinHashes:
        tag = self.tag_for(version.version)
        info = await self._remote().list_ref(
            self.repository.clone_url(), f"{TAG_REF_PREFIX}{tag}"
        )
        archive_url = None if self.submodules else self.repository.release_archive_url(tag)
        url, hash_ = await self._hash(info.revision, archive_url)
        return ReleasePinHashes(revision=info.revision, hash=hash_, url=url)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("repository", self.repository.display_url()),
            ("pre_releases", str(self.pre_releases).lower()),
            ("version_upper_bound", self.version_upper_bound or NOT_AVAILABLE),
            ("release_prefix", self.release_prefix or NOT_AVAILABLE),
            ("submodules", str(self.submodules).lower()),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'GitRelease',
            'repository': self.repository.to_dict(),
            'pre_releases': self.pre_releases,
            'version_upper_bound': self.version_upper_bound,
            'release_prefix': self.release_prefix,
            'submodules': self.submodules,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **collaborators) -> 'GitReleasePin':
        return cls(
            repository=Repository.from_dict(data['repository']),
            pre_releases=data.get('pre_releases', False),
            version_upper_bound=data.get('version_upper_bound'),
            release_prefix=data.get('release_prefix'),
            submodules=data.get('submodules', False),
            **collaborators,
        )
