"""
GitHub API client infrastructure for gitpins.

Only one endpoint is needed: commit metadata, to attach a timestamp to
a resolved branch head. Requests go out anonymously unless a token is
configured (github.token or GITHUB_TOKEN).
"""

import asyncio
import logging
from typing import Optional, Dict, Any

import requests

from ..config import load_config, get_github_api_url, get_github_token
from ..exit_codes import HostAPIError

logger = logging.getLogger(__name__)


class GitHubClient:
    """
    GitHub REST API client.

    Blocking requests calls run on the default executor so callers can
    await them next to the git subprocesses.

    Example:
        client = GitHubClient()
        date = await client.commit_date("owner", "repo", "1edb0a9c...")
    """

    def __init__(self, token: Optional[str] = None, api_url: Optional[str] = None):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (defaults to github.token config or GITHUB_TOKEN env var)
            api_url: API host (defaults to github.api_host config or GITPINS_GITHUB_API_HOST)
        """
        if token is None or api_url is None:
            config = load_config()
            token = token or get_github_token(config)
            api_url = api_url or get_github_api_url(config)
        self.token = token
        self.api_url = api_url.rstrip('/')

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'gitpins'
        }
        if self.token:
            headers['Authorization'] = f'token {self.token}'
        return headers

    def _get_json(self, url: str) -> Any:
        """GET a URL and decode the JSON body."""
        logger.debug(f"GET {url}")
        try:
            response = requests.get(url, headers=self._headers())
            response.raise_for_status()
        except requests.RequestException as e:
            raise HostAPIError(f"Couldn't fetch timestamp from {url}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise HostAPIError(f"Couldn't decode response from {url} as JSON") from e

    async def get_json(self, endpoint: str) -> Any:
        """Call an API endpoint (relative to the API host) without blocking the loop."""
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get_json, url)

    async def commit_date(self, owner: str, repo: str, revision: str) -> str:
        """
        Get the author date of a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            revision: Commit sha

        Returns:
            The ISO 8601 date string from `commit.author.date`
        """
        body = await self.get_json(f"repos/{owner}/{repo}/commits/{revision}")
        date = _nested(body, 'commit', 'author', 'date')
        if not isinstance(date, str):
            raise HostAPIError(
                "Expected date in GitHub API response to be a string"
            )
        return date


def _nested(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data
