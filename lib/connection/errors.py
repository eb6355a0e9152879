"""
Connection-specific exceptions.

This module defines the exception hierarchy for messaging errors.
All exceptions inherit from ConnectionError for easy catching.
"""


class ConnectionError(Exception):
    """
    Base exception for connection errors.

    All messaging-related exceptions inherit from this class,
    allowing catch-all exception handling when needed.
    """
    pass


class AuthenticationError(ConnectionError):
    """
    Login to the platform failed.

    Raised when the bot token is rejected.
    """
    pass


class NotConnectedError(ConnectionError):
    """
    Operation requires active connection.

    Raised when attempting to send or fetch messages before the
    gateway session is ready.
    """
    pass


class SendError(ConnectionError):
    """
    Failed to send, edit or pin a message.

    Raised when the platform rejects the request or the network
    call fails.
    """
    pass


class MessageNotFoundError(ConnectionError):
    """
    Target message or channel does not exist.

    Raised when fetching a message by ID that was deleted or
    lives in a channel the bot cannot see.
    """
    pass
