"""
Git client infrastructure for gitpins.

Provides a clean abstraction over `git ls-remote`.
All remote ref lookups go through this client, making them:
- Easy to replace with a fake in tests
- Consistent in error handling
- Isolated from the pin logic
"""

import asyncio
import os
from dataclasses import dataclass
from typing import List, Sequence
import logging

from ..domain.repository import redact_url
from ..exit_codes import RemoteProtocolError, RefNotFoundError, RefMismatchError

logger = logging.getLogger(__name__)

# Disable any interactive login attempts, failing instead
GIT_ENV_OVERRIDES = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_SSH_COMMAND": "ssh -o StrictHostKeyChecking=yes",
}

HEAD_REF_PREFIX = "ref: refs/heads/"


@dataclass(frozen=True)
class RemoteInfo:
    """One line of `git ls-remote` output."""
    revision: str
    ref: str


def parse_ls_remote_output(stdout: str) -> List[RemoteInfo]:
    """
    Parse `git ls-remote` output into RemoteInfo entries.

    Each line is `<revision>\\t<ref>`. Empty lines (the trailing newline)
    are skipped.

    Raises:
        RemoteProtocolError: if a line has no tab or more than one
    """
    remotes = []
    for line in stdout.split('\n'):
        if not line:
            continue
        tabs = line.count('\t')
        if tabs == 0:
            raise RemoteProtocolError(f"Output line contains no '\\t': {line!r}")
        if tabs > 1:
            raise RemoteProtocolError(f"Output line contains more than one '\\t': {line!r}")
        revision, ref = line.split('\t')
        logger.debug(f"Found remote: {revision}, {ref}")
        remotes.append(RemoteInfo(revision=revision, ref=ref))
    return remotes


class GitRemoteClient:
    """
    Abstraction over `git ls-remote`.

    Example:
        client = GitRemoteClient()
        head = await client.branch_head("https://github.com/owner/repo.git", "main")
        print(head.revision)
    """

    def __init__(self, git: str = "git"):
        """
        Initialize GitRemoteClient.

        Args:
            git: git executable to run (default: "git")
        """
        self.git = git

    def _env(self):
        env = os.environ.copy()
        env.update(GIT_ENV_OVERRIDES)
        return env

    async def _run(self, args: Sequence[str]) -> str:
        """Run `git ls-remote <args>` and return its stdout."""
        logger.debug(f"Executing `git ls-remote {' '.join(redact_url(a) for a in args)}`")
        try:
            process = await asyncio.create_subprocess_exec(
                self.git, 'ls-remote', *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env(),
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            raise RemoteProtocolError(f"Failed waiting for git ls-remote subprocess: {e}") from e

        if process.returncode != 0:
            raise RemoteProtocolError(
                f"git ls-remote failed with exit code {process.returncode}\n"
                f"{stderr.decode(errors='replace')}"
            )

        output = stdout.decode(errors='replace')
        logger.debug("git ls-remote stdout:")
        for line in output.split('\n'):
            logger.debug(f"> {line}")
        return output

    async def ls_remote(self, url: str, args: Sequence[str]) -> List[RemoteInfo]:
        """
        Run `git ls-remote` and parse the result.

        Any failure is re-raised with the repository URL attached.
        """
        try:
            return parse_ls_remote_output(await self._run(args))
        except RemoteProtocolError as e:
            raise RemoteProtocolError(f"Failed to query remote '{redact_url(url)}': {e}", url=url) from e

    async def list_ref(self, url: str, ref: str) -> RemoteInfo:
        """
        Get the commit for a ref.

        `git ls-remote` matches the pattern against the tail of each ref
        ("refs/heads/master" also matches "refs/heads/old/refs/heads/master"),
        so the result is filtered down to an exact match.
        """
        try:
            remotes = await self.ls_remote(url, ['--refs', url, ref])
        except RemoteProtocolError as e:
            raise RemoteProtocolError(
                f"Failed to get revision from remote for {redact_url(url)} {ref}: {e}", url=url
            ) from e

        if not remotes:
            raise RefNotFoundError(
                f"git ls-remote output is empty. Are you sure '{ref}' exists? "
                "Note: If you want to tag a revision, you need to also specify a branch ('--branch')."
            )

        for remote in remotes:
            if remote.ref == ref:
                return remote

        raise RefMismatchError(
            f"git ls-remote output does not contain the requested remote '{ref}'. "
            "This should not have happened!"
        )

    async def branch_head(self, url: str, branch: str) -> RemoteInfo:
        """Get the revision for a branch."""
        return await self.list_ref(url, f"refs/heads/{branch}")

    async def list_tags(self, url: str) -> List[RemoteInfo]:
        """List all tags of a repository."""
        try:
            return await self.ls_remote(url, ['--refs', url, 'refs/tags/*'])
        except RemoteProtocolError as e:
            raise RemoteProtocolError(f"Failed to list tags for {redact_url(url)}: {e}", url=url) from e

    async def default_branch(self, url: str) -> str:
        """Resolve the branch the remote HEAD points to."""
        try:
            remotes = await self.ls_remote(url, ['--symref', url, 'HEAD'])
        except RemoteProtocolError as e:
            raise RemoteProtocolError(
                f"Failed to resolve default branch for {redact_url(url)}: {e}", url=url
            ) from e

        for info in remotes:
            if info.revision.startswith(HEAD_REF_PREFIX) and info.ref == 'HEAD':
                return info.revision[len(HEAD_REF_PREFIX):]

        raise RefNotFoundError(f"Failed to resolve HEAD to a ref for {redact_url(url)}")
