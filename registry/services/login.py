from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from registry.exceptions import InvalidCredentials, MissingCredentials
from registry.models import User
from registry.projections import IdentityProjection
from registry.services.audit import log_action
from registry.services.credentials import CredentialHasher
from registry.services.registration import normalize_email
from registry.services.store import RecordStore
from registry.services.tokens import SessionTokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: IdentityProjection
    token: str = field(repr=False)

    def as_dict(self) -> dict:
        return {'token': self.token, 'user': self.user.as_dict()}


class Authenticator:
    """Exchanges (email, password, role) for a session token.

    Unknown email, a role that does not match the account and a wrong
    password are indistinguishable to the caller.
    """

    def __init__(self, *, users: RecordStore, hasher: CredentialHasher, issuer: SessionTokenIssuer):
        self.users = users
        self.hasher = hasher
        self.issuer = issuer
        self._dummy_digest: Optional[str] = None

    @classmethod
    def from_settings(cls) -> 'Authenticator':
        return cls(users=RecordStore(User), hasher=CredentialHasher(), issuer=SessionTokenIssuer.from_settings())

    def login(self, email: Optional[str], password: Optional[str], role: Optional[str]) -> LoginResult:
        if not all(isinstance(v, str) and v for v in (email, password, role)):
            raise MissingCredentials()
        email = normalize_email(email)
        if not email:
            raise MissingCredentials()

        user = self.users.find_one(email=email, role=role)
        if user is None:
            # Burn one verification so a miss costs about as much as a wrong password
            self.hasher.verify(password, self._dummy())
            self._fail(email, role, 'unknown account')
        if not self.hasher.verify(password, user.password):
            self._fail(email, role, 'wrong password', user_id=user.pk)

        token = self.issuer.issue(user.pk, user.role)
        logger.info('User %s logged in as %s', user.pk, user.role)
        log_action(user_id=user.pk, action='login', object_type='user', object_id=user.pk,
                   detail={'result': 'ok', 'role': user.role})
        return LoginResult(user=IdentityProjection.from_user(user), token=token)

    def _dummy(self) -> str:
        if self._dummy_digest is None:
            self._dummy_digest = self.hasher.hash('login-timing-placeholder')
        return self._dummy_digest

    def _fail(self, email: str, role: str, reason: str, user_id: Optional[int] = None):
        logger.info('Login rejected for role %s: %s', role, reason)
        log_action(user_id=user_id, action='login', object_type='user', object_id=user_id,
                   detail={'result': 'fail', 'email': email, 'role': role})
        raise InvalidCredentials()
