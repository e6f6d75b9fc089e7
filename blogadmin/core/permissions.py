"""
Moderation permissions for the user table.

Only admins moderate. An active user can be banned, a banned user can be
unbanned, and either can be deleted.
"""

from dataclasses import dataclass
from typing import Optional

from .models import Role, User, UserStatus


@dataclass(frozen=True)
class ModerationActions:
    can_ban: bool = False
    can_unban: bool = False
    can_delete: bool = False


NO_ACTIONS = ModerationActions()


def moderation_actions(role: Role, user: Optional[User]) -> ModerationActions:
    """Actions the operator may take on the selected user."""
    if role is not Role.ADMIN or user is None:
        return NO_ACTIONS
    return ModerationActions(
        can_ban=user.status is UserStatus.ACTIVE,
        can_unban=user.status is UserStatus.BANNED,
        can_delete=True,
    )
