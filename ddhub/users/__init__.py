"""
User lookup and contributor flag management.
"""

from ddhub.users.user_service import UserRecord, UserService

__all__ = [
    "UserRecord",
    "UserService",
]
