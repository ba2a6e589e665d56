from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from exam_service.core.identity import normalize_id

STAFF_ROLES = frozenset({"teacher", "admin"})


@dataclass(frozen=True, slots=True)
class Principal:
    """Caller identity extracted from a validated bearer token.

    Carried through the request via FastAPI's dependency system and handed
    to the services explicitly; nothing in the core reads identity from
    ambient state.

        user_id: subject from the token (opaque string as issued)
        roles: platform roles (student, teacher, admin)
    """

    user_id: str
    roles: frozenset[str]

    @property
    def id(self) -> UUID | None:
        return normalize_id(self.user_id)

    def has_any_role(self, roles: set[str] | frozenset[str]) -> bool:
        return bool(self.roles & roles)

    def is_staff(self) -> bool:
        return self.has_any_role(STAFF_ROLES)
