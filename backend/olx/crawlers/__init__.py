"""Browser session management."""

from .browser import BrowserSession, DEFAULT_USER_AGENT, DEFAULT_TIMEOUT_MS

__all__ = ['BrowserSession', 'DEFAULT_USER_AGENT', 'DEFAULT_TIMEOUT_MS']
