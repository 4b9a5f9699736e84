"""
Repository domain objects for gitpins.

A Repository says where a pinned project lives. The set of hosters is
closed: plain git URLs, GitHub, GitLab (gitlab.com or self-hosted) and
Forgejo. Hosted variants know how to build tarball URLs, which are much
faster to hash than a full clone; plain git repositories can only be
cloned.

All variants are frozen dataclasses, so equality and hashing are
structural.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple, Type
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from ..config import get_github_url, get_github_api_url, get_gitlab_token
from ..exit_codes import URLTemplateError

DEFAULT_GITLAB_SERVER = "https://gitlab.com/"


def _base_url(server: str, host_type: str) -> str:
    """Validate that `server` can take path segments and strip the trailing slash."""
    parts = urlsplit(server)
    if not parts.scheme or not parts.netloc or parts.query or parts.fragment:
        raise URLTemplateError(f"{host_type} server URL must be a base: '{server}'")
    return server.rstrip('/')


def redact_url(url: str) -> str:
    """Remove any username/password from a URL."""
    parts = urlsplit(url)
    if '@' not in parts.netloc:
        return url
    netloc = parts.netloc.rsplit('@', 1)[1]
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


@dataclass(frozen=True)
class Repository:
    """
    Abstraction over different git repository hosters.

    Use one of the subclasses; `Repository.from_dict` picks the right one
    from the serialized "type" field.
    """

    type_name = "Repository"

    def clone_url(self) -> str:
        """Get the URL to the represented git repository."""
        raise NotImplementedError

    def display_url(self) -> str:
        """The clone URL without any embedded credentials."""
        return redact_url(self.clone_url())

    def archive_url(self, revision: str) -> Optional[str]:
        """Get the URL to a tarball of the requested revision, if the hoster has one."""
        return None

    def release_archive_url(self, tag: str) -> Optional[str]:
        """Get the URL to a tarball of the requested release tag, if the hoster has one."""
        return None

    async def commit_timestamp(self, revision: str, client=None) -> Optional[str]:
        """Commit date for `revision`; only GitHub exposes one."""
        return None

    def properties(self) -> List[Tuple[str, str]]:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Repository':
        """Create the right Repository variant from its serialized form."""
        type_name = data.get('type')
        variant = _VARIANTS.get(type_name)
        if variant is None:
            raise ValueError(f"Unknown repository type: {type_name!r}")
        fields = {k: v for k, v in data.items() if k != 'type'}
        return variant(**fields)


@dataclass(frozen=True)
class GitRepository(Repository):
    """Any repository reachable by URL. Cannot provide tarball URLs."""
    url: str

    type_name = "Git"

    def clone_url(self) -> str:
        return self.url

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("type", self.type_name),
            ("url", redact_url(self.url)),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type_name, 'url': self.url}


@dataclass(frozen=True)
class GitHubRepository(Repository):
    """A repository on GitHub (or the host set by GITPINS_GITHUB_HOST)."""
    owner: str
    repo: str

    type_name = "GitHub"

    def clone_url(self) -> str:
        return f"{get_github_url()}/{self.owner}/{self.repo}.git"

    def archive_url(self, revision: str) -> Optional[str]:
        return f"{get_github_url()}/{self.owner}/{self.repo}/archive/{revision}.tar.gz"

    def release_archive_url(self, tag: str) -> Optional[str]:
        # The API route takes the full ref, so a branch with the same name
        # as the tag cannot make the download ambiguous.
        return f"{get_github_api_url()}/repos/{self.owner}/{self.repo}/tarball/refs/tags/{tag}"

    async def commit_timestamp(self, revision: str, client=None) -> Optional[str]:
        if client is None:
            from ..infra.github_client import GitHubClient
            client = GitHubClient()
        return await client.commit_date(self.owner, self.repo, revision)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("type", self.type_name),
            ("owner", self.owner),
            ("repo", self.repo),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type_name, 'owner': self.owner, 'repo': self.repo}


@dataclass(frozen=True)
class ForgejoRepository(Repository):
    """A repository on a Forgejo (or Gitea) server."""
    server: str
    owner: str
    repo: str

    type_name = "Forgejo"

    def _server(self) -> str:
        return _base_url(self.server, self.type_name)

    def clone_url(self) -> str:
        return f"{self._server()}/{self.owner}/{self.repo}.git"

    def archive_url(self, revision: str) -> Optional[str]:
        return f"{self._server()}/{self.owner}/{self.repo}/archive/{revision}.tar.gz"

    def release_archive_url(self, tag: str) -> Optional[str]:
        return f"{self._server()}/api/v1/repos/{self.owner}/{self.repo}/archive/{tag}.tar.gz"

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("type", self.type_name),
            ("server", redact_url(self.server)),
            ("owner", self.owner),
            ("repo", self.repo),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type_name,
            'server': self.server,
            'owner': self.owner,
            'repo': self.repo,
        }


@dataclass(frozen=True)
class GitLabRepository(Repository):
    """
    A repository on gitlab.com or a self-hosted GitLab instance.

    `repo_path` is usually "owner/repo" or "group/owner/repo", without
    leading or trailing slashes. `private_token` grants access to private
    repositories; without it the GITLAB_TOKEN environment variable is used
    for cloning.
    """
    repo_path: str
    server: str = DEFAULT_GITLAB_SERVER
    private_token: Optional[str] = field(default=None, repr=False)

    type_name = "GitLab"

    def _server(self) -> str:
        return _base_url(self.server, self.type_name)

    def clone_url(self) -> str:
        server = self._server()
        token = self.private_token or get_gitlab_token()
        parts = urlsplit(server)
        netloc = parts.netloc.rsplit('@', 1)[-1]
        if token:
            netloc = f"oauth2:{quote(token, safe='')}@{netloc}"
        path = f"{parts.path}/{self.repo_path}.git"
        return urlunsplit((parts.scheme, netloc, path, '', ''))

    def _api_archive_url(self, sha: str) -> str:
        project = quote(self.repo_path, safe='')
        query = [('sha', sha)]
        if self.private_token:
            query.append(('private_token', self.private_token))
        return (
            f"{self._server()}/api/v4/projects/{project}/repository/archive.tar.gz?"
            + urlencode(query, safe='/', quote_via=quote)
        )

    def archive_url(self, revision: str) -> Optional[str]:
        return self._api_archive_url(revision)

    def release_archive_url(self, tag: str) -> Optional[str]:
        return self._api_archive_url(tag)

    def properties(self) -> List[Tuple[str, str]]:
        return [
            ("type", self.type_name),
            ("server", redact_url(self.server)),
            ("repo_path", self.repo_path),
        ]

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': self.type_name,
            'repo_path': self.repo_path,
            'server': self.server,
        }
        if self.private_token is not None:
            result['private_token'] = self.private_token
        return result


_VARIANTS: Dict[str, Type[Repository]] = {
    variant.type_name: variant
    for variant in (GitRepository, GitHubRepository, ForgejoRepository, GitLabRepository)
}
