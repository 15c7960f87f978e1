"""
User records for Datadog Hub.

One row per Google account in the users table, keyed by email:

- email (PK)
- isContributor: Boolean - may upload/delete shared artifacts
- createdAt: ISO-8601 timestamp of first sign-in

Rows are created on first sign-in with ``isContributor = False``. The flag
is only ever flipped out-of-band (console / admin script).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, TypedDict

from botocore.exceptions import ClientError

from ddhub.logutil import clogger
from ddhub.storage.dynamo_utils import load_item


class UserRecord(TypedDict):
    email: str
    isContributor: bool
    createdAt: str


def _to_record(item: dict) -> UserRecord:
    return {
        "email": item["email"],
        # anything but a real boolean True means "not a contributor"
        "isContributor": item.get("isContributor") is True,
        "createdAt": item.get("createdAt", ""),
    }


class UserService:
    """
    Lookup/creation of user rows.

    Args:
        table: boto3 DynamoDB Table resource for the users table
    """

    def __init__(self, table: Any):
        self.table = table

    def get_user(self, email: str) -> Optional[UserRecord]:
        item = load_item(self.table, {"email": email})
        return _to_record(item) if item else None

    def get_or_create(self, email: str) -> UserRecord:
        """
        Return the user's row, creating it on first sign-in.

        Uses a conditional put so two concurrent first sign-ins cannot
        overwrite each other; the loser re-reads the winner's row.

        Raises:
            ClientError: DynamoDB failure
        """
        existing = self.get_user(email)
        if existing is not None:
            clogger.debug(f"[user_service] Existing user {email}")
            return existing

        record: UserRecord = {
            "email": email,
            "isContributor": False,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.table.put_item(
                Item=dict(record),
                ConditionExpression="attribute_not_exists(email)",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ConditionalCheckFailedException":
                raise
            clogger.info(f"[user_service] User {email} created concurrently; re-reading")
            winner = self.get_user(email)
            if winner is None:
                raise
            return winner

        clogger.info(f"[user_service] Created user {email}")
        return record

    def is_contributor(self, email: str) -> bool:
        """
        True only if a row exists and its flag is exactly True.

        Raises:
            ClientError: DynamoDB failure
        """
        user = self.get_user(email)
        return bool(user and user["isContributor"])
