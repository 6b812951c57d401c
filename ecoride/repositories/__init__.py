"""
Persistence adapters.

Services depend on AccountRepository rather than on SQLAlchemy sessions, so
the store can change without touching the authentication flows.
"""

from .account_repository import AccountRepository

__all__ = ["AccountRepository"]
