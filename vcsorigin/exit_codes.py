"""
Standard exit codes for vcsorigin commands.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # User error: bad reference, glob, author policy
PERMISSION_ERROR = 67    # Insufficient permissions
REPO_ERROR = 68          # Operational error: missing revision, I/O, network
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for exceptions outside the OriginError hierarchy
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': REPO_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': REPO_ERROR,
    'TimeoutError': REPO_ERROR,
    'ValueError': USAGE_ERROR,
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
    exit_code = getattr(exc, 'exit_code', None)
    if isinstance(exit_code, int):
        return exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)

