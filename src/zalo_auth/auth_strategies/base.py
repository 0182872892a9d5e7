# auth_strategies/base.py

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from starlette.requests import Request

from zalo_auth.schemas.oauth import AuthOutcome


class BaseAuthStrategy(ABC):
    """
    Base class for all authentication strategies
    All strategies must implement this interface
    """

    def __init__(self, name: str):
        self.name = name
        self.created_at = datetime.now(UTC)

    @abstractmethod
    async def authenticate(
        self, request: Request, options: dict[str, Any] | None = None
    ) -> AuthOutcome:
        """
        Authenticate an incoming request

        Args:
            request: The HTTP request being handled (login start or provider callback)
            options: Per-call options (scope, callback_url, display, ...)

        Returns:
            AuthOutcome telling the caller to redirect, accept the user, or reject

        Raises:
            ZaloAuthException: If the provider or the transport reports an error
        """
        pass

    def get_strategy_metadata(self) -> dict[str, Any]:
        """
        Get metadata about this strategy

        Returns:
            Dictionary with strategy information
        """
        return {
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }
