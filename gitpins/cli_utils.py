"""
Common CLI utilities and decorators for consistent command behavior.
"""

import asyncio
import json
import logging
import sys
import click
from functools import wraps
from typing import Any, Generator, Optional, Tuple

from .config import configure_logging, load_config
from .domain.repository import (
    Repository,
    GitRepository,
    GitHubRepository,
    GitLabRepository,
    ForgejoRepository,
    DEFAULT_GITLAB_SERVER,
)
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import FORMATS, format_output, get_format_from_env

logger = logging.getLogger(__name__)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Logging configured from the config file, -v for debug output
    - Clean JSON/YAML output on stdout
    - Consistent error handling: errors become a JSON object on stdout
      and the exit code of the error
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', False)
        output_format = kwargs.pop('format', None) or get_format_from_env('jsonl')

        try:
            configure_logging('DEBUG' if verbose else None, load_config())

            result = func(*args, **kwargs)

            if result is None:
                # Command handles its own output
                pass
            elif isinstance(result, Generator):
                for line in format_output(result, output_format):
                    print(line, flush=True)
            elif isinstance(result, (list, tuple)):
                for line in format_output(iter(result), output_format):
                    print(line, flush=True)
            else:
                for line in format_output(iter([result]), output_format):
                    print(line, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.debug("Command failed", exc_info=True)
            error_obj = {
                "error": str(e),
                "type": type(e).__name__,
                "exit_code": e.exit_code
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            error_obj = {
                "error": str(e),
                "type": type(e).__name__
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    wrapper = click.option('-v', '--verbose', is_flag=True,
                           help='Show debug logging on stderr')(wrapper)
    wrapper = click.option('-f', '--format', type=click.Choice(list(FORMATS)),
                           help='Output format (default: jsonl, or from GITPINS_FORMAT env)')(wrapper)
    return wrapper


def run_async(coro) -> Any:
    """Run a coroutine to completion from a synchronous click command."""
    return asyncio.run(coro)


def _split_owner_repo(value: str, option: str) -> Tuple[str, str]:
    owner, sep, repo = value.partition('/')
    if not sep or not owner or not repo or '/' in repo:
        raise click.BadParameter(f"expected OWNER/REPO, got '{value}'", param_hint=option)
    return owner, repo


def build_repository(
    git_url: Optional[str] = None,
    github: Optional[str] = None,
    gitlab: Optional[str] = None,
    server: Optional[str] = None,
    private_token: Optional[str] = None,
    forgejo: Optional[Tuple[str, str]] = None,
) -> Repository:
    """Build a Repository from exactly one of the repository options."""
    chosen = [name for name, value in (
        ('--git', git_url), ('--github', github), ('--gitlab', gitlab), ('--forgejo', forgejo)
    ) if value]
    if len(chosen) != 1:
        raise click.UsageError(
            "Specify exactly one of --git, --github, --gitlab or --forgejo"
            + (f" (got {', '.join(chosen)})" if chosen else "")
        )
    if (server or private_token) and not gitlab:
        raise click.UsageError("--server and --private-token only apply to --gitlab")

    if git_url:
        return GitRepository(url=git_url)
    if github:
        owner, repo = _split_owner_repo(github, '--github')
        return GitHubRepository(owner=owner, repo=repo)
    if gitlab:
        return GitLabRepository(
            repo_path=gitlab.strip('/'),
            server=server or DEFAULT_GITLAB_SERVER,
            private_token=private_token,
        )
    forgejo_server, owner_repo = forgejo
    owner, repo = _split_owner_repo(owner_repo, '--forgejo')
    return ForgejoRepository(server=forgejo_server, owner=owner, repo=repo)


def repository_options(func):
    """
    Add the repository selection options to a command.

    The command receives a single `repository` keyword argument.

    Example:
        @click.command()
        @repository_options
        def my_command(repository):
            ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        kwargs['repository'] = build_repository(
            git_url=kwargs.pop('git_url'),
            github=kwargs.pop('github'),
            gitlab=kwargs.pop('gitlab'),
            server=kwargs.pop('server'),
            private_token=kwargs.pop('private_token'),
            forgejo=kwargs.pop('forgejo'),
        )
        return func(*args, **kwargs)

    options = [
        click.option('--git', 'git_url', metavar='URL',
                     help='Any git repository reachable by URL'),
        click.option('--github', metavar='OWNER/REPO',
                     help='Repository on GitHub'),
        click.option('--gitlab', metavar='PATH',
                     help='Repository path on GitLab, e.g. group/owner/repo'),
        click.option('--server', metavar='URL',
                     help=f'GitLab server (default: {DEFAULT_GITLAB_SERVER})'),
        click.option('--private-token', metavar='TOKEN',
                     help='GitLab access token (default: GITLAB_TOKEN env)'),
        click.option('--forgejo', nargs=2, metavar='SERVER OWNER/REPO', default=None,
                     help='Repository on a Forgejo server'),
    ]
    for option in reversed(options):
        wrapper = option(wrapper)
    return wrapper
