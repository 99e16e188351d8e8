"""Consultant directory: consultant records merged with their accounts."""
from typing import Any, List, Mapping

from counsel_booking.errors import BookingError, NotFoundError, ValidationError
from counsel_booking.http_client import BackendClient
from counsel_booking.logging_config import get_logger
from counsel_booking.models import Consultant, parse_many

logger = get_logger(__name__)


class ConsultantService:
    """Reads consultants and enriches them with account details."""

    def __init__(self, client: BackendClient):
        self.client = client

    def get_consultants(self) -> List[Consultant]:
        """
        List all consultants with account details.

        A consultant whose account cannot be fetched is still listed, built
        from the consultant record alone. Malformed records are skipped.
        """
        records = self.client.get("consultants") or []
        if not records:
            logger.warning("no_consultants_found")
            return []

        def build(record: Mapping[str, Any]) -> Consultant:
            account = None
            try:
                account = self.client.get(f"account/{record.get('accountId')}")
            except BookingError as exc:
                logger.warning(
                    "consultant_account_missing",
                    consultant_id=record.get("id"),
                    error=exc.message,
                )
            if not isinstance(account, Mapping):
                account = None
            return Consultant.from_api(record, account)

        return parse_many(build, records, "consultant")

    def get_consultant(self, account_id: Any) -> Consultant:
        """
        Fetch one consultant by account ID.

        Raises:
            ValidationError: The account is not a consultant
            NotFoundError: No consultant record belongs to the account
        """
        account = self.client.get(f"account/{account_id}") or {}
        if account.get("role") != "CONSULTANT":
            raise ValidationError("Account is not a consultant")

        records = self.client.get("consultants") or []
        record = next(
            (
                item for item in records
                if isinstance(item, Mapping) and item.get("accountId") == account.get("id")
            ),
            None,
        )
        if record is None:
            raise NotFoundError("Consultant information not found")

        return Consultant.from_api(record, account)
