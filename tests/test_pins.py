"""Tests for the branch and release pin lifecycle."""

import asyncio
import logging
from typing import Dict, List
from unittest.mock import AsyncMock

import pytest

from gitpins.domain.repository import GitRepository, GitHubRepository, GitLabRepository
from gitpins.domain.version import GenericVersion, GitRevision, OptionalUrlHashes, ReleasePinHashes
from gitpins.exit_codes import (
    InvalidConfigurationError,
    MonotonicityError,
    NoMatchingReleaseError,
    RefNotFoundError,
)
from gitpins.infra.git_client import RemoteInfo
from gitpins.infra.prefetch import Prefetcher
from gitpins.pins import GitPin, GitReleasePin

REV_A = "a" * 40
REV_B = "b" * 40


class FakeRemote:
    """Stands in for GitRemoteClient, serving refs from a dict."""

    def __init__(self, refs: Dict[str, str]):
        self.refs = refs
        self.calls: List[tuple] = []

    async def list_ref(self, url, ref):
        self.calls.append(('list_ref', url, ref))
        if ref not in self.refs:
            raise RefNotFoundError(f"no {ref}")
        return RemoteInfo(revision=self.refs[ref], ref=ref)

    async def branch_head(self, url, branch):
        return await self.list_ref(url, f"refs/heads/{branch}")

    async def list_tags(self, url):
        self.calls.append(('list_tags', url))
        return [
            RemoteInfo(revision=revision, ref=ref)
            for ref, revision in self.refs.items()
            if ref.startswith("refs/tags/")
        ]


class FakePrefetcher(Prefetcher):
    """Records what would have been hashed."""

    def __init__(self):
        self.tarballs: List[str] = []
        self.checkouts: List[tuple] = []

    async def hash_of_tarball(self, url):
        self.tarballs.append(url)
        return "sha256-tarball"

    async def hash_of_git_checkout(self, repo_url, revision, include_submodules):
        self.checkouts.append((repo_url, revision, include_submodules))
        return "sha256-checkout"


def tags(*names, revision=REV_A):
    return {f"refs/tags/{name}": revision for name in names}


class TestGitPin:
    """Tests for GitPin."""

    def make_pin(self, repository=None, submodules=False, refs=None, github=None):
        return GitPin(
            repository=repository or GitHubRepository(owner="o", repo="r"),
            branch="main",
            submodules=submodules,
            remote=FakeRemote(refs if refs is not None else {"refs/heads/main": REV_A}),
            prefetcher=FakePrefetcher(),
            github=github,
        )

    def test_update_with_timestamp(self):
        github = AsyncMock()
        github.commit_date.return_value = "2024-01-01T00:00:00Z"
        pin = self.make_pin(github=github)

        version = asyncio.run(pin.update())

        assert version == GitRevision(revision=REV_A, timestamp="2024-01-01T00:00:00Z")
        assert pin.remote.calls == [('list_ref', "https://github.com/o/r.git", "refs/heads/main")]
        github.commit_date.assert_awaited_once_with("o", "r", REV_A)

    def test_update_ignores_old_version(self):
        pin = self.make_pin(repository=GitRepository(url="https://example.org/r.git"))
        old = GitRevision(revision=REV_B)
        assert asyncio.run(pin.update(old)) == GitRevision(revision=REV_A)

    def test_update_missing_branch(self):
        pin = self.make_pin(refs={})
        with pytest.raises(RefNotFoundError):
            asyncio.run(pin.update())

    def test_timestamp_failure_aborts_update(self):
        from gitpins.exit_codes import HostAPIError
        github = AsyncMock()
        github.commit_date.side_effect = HostAPIError("rate limited")
        pin = self.make_pin(github=github)
        with pytest.raises(HostAPIError):
            asyncio.run(pin.update())

    def test_fetch_tarball(self):
        pin = self.make_pin()
        hashes = asyncio.run(pin.fetch(GitRevision(revision=REV_A)))

        url = f"https://github.com/o/r/archive/{REV_A}.tar.gz"
        assert hashes == OptionalUrlHashes(hash="sha256-tarball", url=url)
        assert pin.prefetcher.tarballs == [url]
        assert pin.prefetcher.checkouts == []

    def test_fetch_plain_git_uses_checkout(self):
        pin = self.make_pin(repository=GitRepository(url="https://example.org/r.git"))
        hashes = asyncio.run(pin.fetch(GitRevision(revision=REV_A)))

        assert hashes == OptionalUrlHashes(hash="sha256-checkout", url=None)
        assert pin.prefetcher.checkouts == [("https://example.org/r.git", REV_A, False)]

    def test_fetch_submodules_forces_checkout(self):
        pin = self.make_pin(submodules=True)
        hashes = asyncio.run(pin.fetch(GitRevision(revision=REV_A)))

        assert hashes.url is None
        assert pin.prefetcher.tarballs == []
        assert pin.prefetcher.checkouts == [("https://github.com/o/r.git", REV_A, True)]

    def test_properties(self):
        pin = self.make_pin(submodules=True)
        assert pin.properties() == [
            ("repository", "https://github.com/o/r.git"),
            ("branch", "main"),
            ("submodules", "true"),
        ]

    def test_round_trip(self):
        pin = GitPin(repository=GitLabRepository(repo_path="a/b"), branch="dev", submodules=True)
        assert GitPin.from_dict(pin.to_dict()) == pin

    def test_collaborators_do_not_affect_equality(self):
        repo = GitRepository(url="https://example.org/r.git")
        assert GitPin(repository=repo, branch="main", remote=FakeRemote({})) == GitPin(
            repository=repo, branch="main"
        )


class TestGitReleasePin:
    """Tests for GitReleasePin."""

    def make_pin(self, refs, repository=None, **kwargs):
        return GitReleasePin(
            repository=repository or GitHubRepository(owner="o", repo="r"),
            remote=FakeRemote(refs),
            prefetcher=FakePrefetcher(),
            **kwargs,
        )

    def test_update_picks_latest(self):
        pin = self.make_pin(tags("1.0", "1.2", "nightly", "1.3-rc1"))
        assert asyncio.run(pin.update()) == GenericVersion(version="1.2")

    def test_update_with_pre_releases(self):
        pin = self.make_pin(tags("1.0", "1.2", "1.3-rc1"), pre_releases=True)
        assert asyncio.run(pin.update()).version == "1.3-rc1"

    def test_update_ignores_branches(self):
        refs = {"refs/heads/9.0": REV_B, **tags("1.0")}
        assert asyncio.run(self.make_pin(refs).update()).version == "1.0"

    def test_update_upper_bound(self):
        pin = self.make_pin(tags("1.0", "2.0", "2.0-pre"), version_upper_bound="2")
        assert asyncio.run(pin.update()).version == "1.0"

    def test_update_invalid_upper_bound(self):
        pin = self.make_pin(tags("1.0"), version_upper_bound="two")
        with pytest.raises(InvalidConfigurationError, match="version_upper_bound"):
            asyncio.run(pin.update())
        assert pin.remote.calls == []

    def test_update_no_matching_release(self):
        pin = self.make_pin(tags("nightly", "latest"))
        with pytest.raises(NoMatchingReleaseError, match="no matching release tags"):
            asyncio.run(pin.update())

    def test_update_returns_name_without_prefix(self):
        pin = self.make_pin(
            tags("foo/1.0", "bar/2.0", "zes/1.0", "zes/2.0", "zes/2.1-b1"),
            release_prefix="zes/",
        )
        assert asyncio.run(pin.update()) == GenericVersion(version="2.0")

    def test_monotonic_update(self):
        pin = self.make_pin(tags("1.0", "1.2"))
        assert asyncio.run(pin.update(GenericVersion("1.1"))).version == "1.2"
        assert asyncio.run(pin.update(GenericVersion("1.2"))).version == "1.2"

    def test_monotonicity_violation(self):
        pin = self.make_pin(tags("1.0", "1.2"))
        with pytest.raises(MonotonicityError) as excinfo:
            asyncio.run(pin.update(GenericVersion("1.5")))
        message = str(excinfo.value)
        assert "1.2" in message
        assert "1.5" in message
        assert excinfo.value.latest == "1.2"
        assert excinfo.value.current == "1.5"

    def test_unparseable_old_version_only_warns(self, caplog):
        pin = self.make_pin(tags("1.0", "1.2"))
        with caplog.at_level(logging.WARNING, logger="gitpins.pins"):
            version = asyncio.run(pin.update(GenericVersion("nightly-2024")))
        assert version.version == "1.2"
        assert "cannot ensure monotonicity" in caplog.text

    def test_monotonicity_strips_prefix_from_old_version(self):
        pin = self.make_pin(tags("zes/1.0", "zes/2.0"), release_prefix="zes/")
        with pytest.raises(MonotonicityError):
            asyncio.run(pin.update(GenericVersion("zes/3.0")))
        # Old values recorded without the prefix are compared as they are
        with pytest.raises(MonotonicityError):
            asyncio.run(pin.update(GenericVersion("3.0")))
        assert asyncio.run(pin.update(GenericVersion("zes/1.0"))).version == "2.0"

    def test_fetch_release_tarball(self):
        pin = self.make_pin(tags("v1.2", revision=REV_B))
        hashes = asyncio.run(pin.fetch(GenericVersion("v1.2")))

        url = "https://api.github.com/repos/o/r/tarball/refs/tags/v1.2"
        assert hashes == ReleasePinHashes(revision=REV_B, hash="sha256-tarball", url=url)
        assert ('list_ref', "https://github.com/o/r.git", "refs/tags/v1.2") in pin.remote.calls

    def test_fetch_reattaches_prefix(self):
        pin = self.make_pin(tags("zes/2.0", revision=REV_B), release_prefix="zes/")
        hashes = asyncio.run(pin.fetch(GenericVersion("2.0")))

        assert hashes.revision == REV_B
        assert pin.remote.calls[-1][2] == "refs/tags/zes/2.0"
        assert hashes.url.endswith("/tarball/refs/tags/zes/2.0")

    def test_fetch_submodules_forces_checkout(self):
        pin = self.make_pin(tags("1.0", revision=REV_B), submodules=True)
        hashes = asyncio.run(pin.fetch(GenericVersion("1.0")))

        assert hashes == ReleasePinHashes(revision=REV_B, hash="sha256-checkout", url=None)
        assert pin.prefetcher.checkouts == [("https://github.com/o/r.git", REV_B, True)]

    def test_fetch_plain_git_uses_checkout(self):
        pin = self.make_pin(
            tags("1.0", revision=REV_B),
            repository=GitRepository(url="https://example.org/r.git"),
        )
        hashes = asyncio.run(pin.fetch(GenericVersion("1.0")))
        assert hashes.url is None
        assert pin.prefetcher.checkouts == [("https://example.org/r.git", REV_B, False)]

    def test_fetch_missing_tag(self):
        pin = self.make_pin(tags("1.0"))
        with pytest.raises(RefNotFoundError):
            asyncio.run(pin.fetch(GenericVersion("9.9")))

    def test_tag_for(self):
        pin = GitReleasePin(repository=GitRepository(url="u"), release_prefix="release/")
        assert pin.tag_for("2.0") == "release/2.0"
        assert pin.tag_for("release/2.0") == "release/2.0"
        assert GitReleasePin(repository=GitRepository(url="u")).tag_for("2.0") == "2.0"

    def test_properties(self):
        pin = GitReleasePin(repository=GitLabRepository(repo_path="a/b", private_token="secret"))
        assert pin.properties() == [
            ("repository", "https://gitlab.com/a/b.git"),
            ("pre_releases", "false"),
            ("version_upper_bound", "N/A"),
            ("release_prefix", "N/A"),
            ("submodules", "false"),
        ]

    def test_repr_hides_token(self):
        pin = GitReleasePin(repository=GitLabRepository(repo_path="a/b", private_token="s3cret"))
        assert "s3cret" not in repr(pin)
        # Equality still takes the token into account
        assert pin != GitReleasePin(repository=GitLabRepository(repo_path="a/b"))

    def test_round_trip(self):
        pin = GitReleasePin(
            repository=GitHubRepository(owner="o", repo="r"),
            pre_releases=True,
            version_upper_bound="2.0",
            release_prefix="v",
        )
        assert GitReleasePin.from_dict(pin.to_dict()) == pin
