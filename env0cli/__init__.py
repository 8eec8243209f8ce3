"""Command-line client and API client for syncing .env files through the Env0 service."""

__version__ = "0.0.3"
__all__ = ["__version__"]