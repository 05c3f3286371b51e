"""
ⒸAngelaMos | 2026
core/errors.py
"""


class TaskHandlerError(Exception):
    """
    Base exception for taskhandler errors
    """

class HostUnavailableError(TaskHandlerError):
    """
    No event loop is available to schedule on
    """

class UnsupportedStrategyError(TaskHandlerError):
    """
    The host cannot provide the requested deferral primitive
    """
