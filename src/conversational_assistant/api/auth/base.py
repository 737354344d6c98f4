"""
Authentication provider abstractions.

Authentication is handled outside this service. An 'AuthProvider' integrates
the upstream identity with the FastAPI application so every request handler
receives the current user id. 'HeaderAuthProvider' trusts a header set by an
authenticating proxy.
"""

from abc import ABC, abstractmethod

from fastapi import FastAPI, Request


class AuthProvider(ABC):
    """
    Abstract base class for authentication backends.

    Implementors must supply a FastAPI dependency that resolves to the current
    user ID ('get_current_user_id') and a setup hook that registers any routes
    or middleware the provider needs ('bind_to_app').
    """

    @abstractmethod
    def get_current_user_id(self, request: Request) -> str:
        """FastAPI dependency that returns the authenticated user's ID.

        Raise 'HTTPException' with status 401 if the request is not authenticated.
        """
        pass

    @abstractmethod
    def bind_to_app(self, app: FastAPI) -> None:
        """Register routes and middleware required by this provider."""
        pass
