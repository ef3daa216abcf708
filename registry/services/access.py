"""
Access guard: turns an ``Authorization`` header into a
:class:`SessionIdentity` and enforces role and hospital scoping.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional

from registry.exceptions import Forbidden, NotAuthenticated
from registry.models import User
from registry.services.store import RecordStore
from registry.services.tokens import SessionTokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionIdentity:
    """The authenticated caller of one request.

    ``role`` comes from the token; ``hospital_id`` is read from the
    user's current record.
    """
    id: int
    role: str
    hospital_id: Optional[int]

    is_authenticated: ClassVar[bool] = True
    is_anonymous: ClassVar[bool] = False

    @property
    def pk(self) -> int:
        return self.id


class AccessGuard:
    keyword = 'Bearer'

    def __init__(self, *, issuer: SessionTokenIssuer, users: RecordStore):
        self.issuer = issuer
        self.users = users

    @classmethod
    def from_settings(cls) -> 'AccessGuard':
        return cls(issuer=SessionTokenIssuer.from_settings(), users=RecordStore(User))

    def extract_token(self, header: Optional[str]) -> str:
        parts = header.split() if isinstance(header, str) else []
        if len(parts) != 2 or parts[0].lower() != self.keyword.lower():
            raise NotAuthenticated()
        return parts[1]

    def resolve(self, token: str) -> SessionIdentity:
        claims = self.issuer.verify(token)
        if claims is None:
            raise NotAuthenticated()
        user = self.users.find_by_id(claims.subject_id)
        if user is None:
            logger.info('Token subject %s no longer exists', claims.subject_id)
            raise NotAuthenticated()
        return SessionIdentity(id=user.pk, role=claims.role, hospital_id=user.hospital_id)

    def authorize(self, header: Optional[str], allowed_roles: Iterable[str] = ()) -> SessionIdentity:
        identity = self.resolve(self.extract_token(header))
        self.check_roles(identity, allowed_roles)
        return identity

    @staticmethod
    def check_roles(identity, allowed_roles: Iterable[str] = ()) -> None:
        if identity is None or not getattr(identity, 'is_authenticated', False):
            raise NotAuthenticated()
        allowed = {str(r) for r in allowed_roles}
        if allowed and identity.role not in allowed:
            raise Forbidden(f'User role {identity.role} is not authorized to access this route')

    @staticmethod
    def ensure_same_hospital(identity: SessionIdentity, hospital_id: Optional[int], action: str) -> None:
        if identity.hospital_id is None or identity.hospital_id != hospital_id:
            raise Forbidden(f'Not authorized to {action}')
