"""
Exit codes for Taskboard CLI.

Semantic exit codes so scripts can tell what went wrong.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Session expired or token rejected
ERROR_AUTH_FAILURE = 3

# Network or server error (unreachable, timeout, 5xx)
ERROR_NETWORK = 4
