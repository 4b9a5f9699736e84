"""
Content hashing infrastructure for gitpins.

Pins decide *what* to hash (a tarball URL, or a repository at a revision);
a Prefetcher decides *how*. The default NixPrefetcher shells out to the
nix prefetch tools and returns SRI hashes ("sha256-...").
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Sequence

from ..domain.repository import redact_url
from ..exit_codes import PrefetchError

logger = logging.getLogger(__name__)


class Prefetcher(ABC):
    """Computes content hashes for downloads and git checkouts."""

    @abstractmethod
    async def hash_of_tarball(self, url: str) -> str:
        """Hash of the unpacked tarball at `url`."""

    @abstractmethod
    async def hash_of_git_checkout(self, repo_url: str, revision: str,
                                   include_submodules: bool) -> str:
        """Hash of a checkout of `repo_url` at `revision`."""


class NixPrefetcher(Prefetcher):
    """
    Prefetcher backed by `nix-prefetch-url` and `nix-prefetch-git`.

    Example:
        prefetcher = NixPrefetcher()
        sri = await prefetcher.hash_of_tarball("https://example.org/src.tar.gz")
    """

    async def _run(self, args: Sequence[str]) -> str:
        shown = ' '.join(redact_url(a) for a in args)
        logger.debug(f"Executing `{shown}`")
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            raise PrefetchError(f"Failed to run `{args[0]}`: {e}") from e

        if process.returncode != 0:
            raise PrefetchError(
                f"`{shown}` failed with exit code {process.returncode}\n"
                f"{stderr.decode(errors='replace')}"
            )
        return stdout.decode(errors='replace').strip()

    async def to_sri(self, hash_: str) -> str:
        """Convert a nix base32 sha256 hash to SRI form."""
        return await self._run([
            'nix', '--extra-experimental-features', 'nix-command',
            'hash', 'to-sri', '--type', 'sha256', hash_,
        ])

    async def hash_of_tarball(self, url: str) -> str:
        output = await self._run([
            'nix-prefetch-url', '--unpack', '--type', 'sha256', '--name', 'source', url,
        ])
        lines = output.splitlines()
        if not lines:
            raise PrefetchError(f"nix-prefetch-url printed no hash for {redact_url(url)}")
        return await self.to_sri(lines[-1].strip())

    async def hash_of_git_checkout(self, repo_url: str, revision: str,
                                   include_submodules: bool) -> str:
        args = ['nix-prefetch-git', '--url', repo_url, '--rev', revision, '--quiet']
        if include_submodules:
            args.append('--fetch-submodules')
        output = await self._run(args)

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise PrefetchError(
                f"Couldn't decode nix-prefetch-git output for {redact_url(repo_url)} as JSON"
            ) from e
        if not isinstance(data, dict):
            data = {}

        if isinstance(data.get('hash'), str):
            return data['hash']
        if isinstance(data.get('sha256'), str):
            return await self.to_sri(data['sha256'])
        raise PrefetchError(
            f"nix-prefetch-git output for {redact_url(repo_url)} contains no hash"
        )
