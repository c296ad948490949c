"""
Identity resolution for the X-User-ID header.

There is no credential check: the header selects a mock identity. The
mapping lives behind the ``Authenticator`` protocol so routes never see the
table, and tests can swap it through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    CONTRIBUTOR = "contributor"


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def can_modify(self, owner_id: Optional[str]) -> bool:
        """Owners and admins may mutate a record."""
        return self.is_admin or owner_id == self.id


class Authenticator(Protocol):
    def resolve(self, user_id: Optional[str]) -> Principal:
        ...


DEFAULT_USERS: Dict[str, Role] = {
    "netrunnerX": Role.ADMIN,
    "reliefAdmin": Role.ADMIN,
    "citizen1": Role.CONTRIBUTOR,
}


class StaticRoleAuthenticator:
    """Fixed in-memory user -> role table.

    Missing or unknown ids resolve to ``default_user_id``.
    """

    def __init__(self, users: Mapping[str, Role], default_user_id: str) -> None:
        if default_user_id not in users:
            raise ValueError(f"default user {default_user_id!r} is not in the role table")
        self._users = dict(users)
        self._default_user_id = default_user_id

    def resolve(self, user_id: Optional[str]) -> Principal:
        uid = (user_id or "").strip()
        if uid not in self._users:
            if uid:
                logger.debug("Unknown user id %r, using default identity", uid)
            uid = self._default_user_id
        return Principal(id=uid, role=self._users[uid])
