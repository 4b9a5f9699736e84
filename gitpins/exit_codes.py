"""
Standard exit codes and error types for gitpins.

Following Unix/POSIX conventions for command-line tools. Every error the
resolution engine raises is a CommandError, so the command line layer can
map it to an exit status without inspecting messages.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NOT_FOUND = 64           # Ref or release not found on the remote
API_ERROR = 65           # Hosting provider API call failed
CONFIG_ERROR = 66        # Configuration error
NETWORK_ERROR = 68       # Remote listing / subprocess failed
DATA_ERROR = 70          # Data format, validation or consistency error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that carries a specific exit code.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when the configuration file cannot be read."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class InvalidConfigurationError(CommandError):
    """Raised for malformed pin fields (revision, version bound)."""
    def __init__(self, message: str):
        super().__init__(message, DATA_ERROR)


class URLTemplateError(CommandError):
    """Raised when a hosting URL template cannot be filled in."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class RemoteProtocolError(CommandError):
    """Raised when `git ls-remote` fails or prints something unexpected."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, NETWORK_ERROR)
        self.url = url


class RefNotFoundError(CommandError):
    """Raised when the remote listing for a ref comes back empty."""
    def __init__(self, message: str):
        super().__init__(message, NOT_FOUND)


class RefMismatchError(CommandError):
    """Raised when the remote listing has entries, but none is the requested ref."""
    def __init__(self, message: str):
        super().__init__(message, NOT_FOUND)


class NoMatchingReleaseError(CommandError):
    """Raised when no tag satisfies the release filters."""
    def __init__(self, message: str = "Repository has no matching release tags"):
        super().__init__(message, NOT_FOUND)


class MonotonicityError(CommandError):
    """Raised when a release pin would move to an older version."""
    def __init__(self, message: str, latest: str = "", current: str = ""):
        super().__init__(message, DATA_ERROR)
        self.latest = latest
        self.current = current


class HostAPIError(CommandError):
    """Raised when a hosting provider API call fails."""
    def __init__(self, message: str):
        super().__init__(message, API_ERROR)


class PrefetchError(CommandError):
    """Raised when the hashing tools fail."""
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)
