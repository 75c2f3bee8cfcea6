"""Taskboard CLI - task collection sync and filtering for the Taskboard API."""

__version__ = "0.3.0"
