"""Account, dashboard and event endpoints.

Login and register are passed through as-is; the backend owns the
authentication protocol. A token found in the login answer is attached to
the shared client so later calls are authenticated.
"""
from typing import Any, Dict, List

from counsel_booking.http_client import BackendClient
from counsel_booking.logging_config import get_logger
from counsel_booking.models import require_positive_id

logger = get_logger(__name__)


class AccountService:
    """Accounts plus the read-only dashboard listings."""

    def __init__(self, client: BackendClient):
        self.client = client

    def login(self, credentials: Dict[str, Any]) -> Any:
        data = self.client.post("login", json=credentials)
        token = data.get("token") if isinstance(data, dict) else None
        if token:
            self.client.set_token(token)
            logger.info("logged_in", account_id=data.get("id"))
        return data

    def register(self, user_data: Dict[str, Any]) -> Any:
        return self.client.post("register", json=user_data)

    def get_account(self, account_id: Any) -> Any:
        return self.client.get(f"account/{account_id}")

    def update_account(self, account_id: Any, user_data: Dict[str, Any]) -> Any:
        return self.client.put("accounts/update", json=user_data, params={"id": account_id})

    def update_avatar(self, account_id: Any, avatar_url: str) -> Any:
        """Replace the avatar; the backend expects the bare URL as text/plain."""
        account_id = require_positive_id(account_id, "account ID")
        return self.client.put(
            f"accounts/{account_id}/avatar",
            data=avatar_url.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

    def get_accounts(self) -> List[Any]:
        return self.client.get("accounts") or []

    def get_courses(self) -> Any:
        return self.client.get("courses")

    def get_events(self) -> Any:
        return self.client.get("events")

    def get_participations(self, account_id: Any) -> List[Any]:
        """Event participations of one account."""
        account_id = require_positive_id(account_id, "account ID")
        return self.client.get(f"participations/account/{account_id}") or []
