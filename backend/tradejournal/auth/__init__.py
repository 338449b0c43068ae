"""Client-side session state."""
from .holder import AuthSession, AuthStateHolder, AuthUser

__all__ = ["AuthSession", "AuthStateHolder", "AuthUser"]
