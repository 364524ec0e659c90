"""Middleware for the shortlinks web app."""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
