"""
Little Application: Ownership Checks
=======================================

What:  The one authorization rule shared by posts, courses and reviews:
       the acting user must own the record or be an admin.
"""

import uuid

from littleapp.exceptions import AuthorizationError
from littleapp.models.user import User


def ensure_owner(owner_id: uuid.UUID, user: User, action: str, resource: str) -> None:
    """
    Raise AuthorizationError unless `user` owns the record or is an admin.

    Example message: "User 5c8a1d5b... is not authorized to update this course"
    """
    if owner_id == user.id or user.is_admin:
        return
    raise AuthorizationError(
        message=f"User {user.id} is not authorized to {action} this {resource}",
        user_id=str(user.id),
        context={"action": action, "resource": resource},
    )
