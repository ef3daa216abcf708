"""
Session tokens: signed, time-bounded credentials carrying a subject id
and a role.

Tokens are HS256 JWTs produced through simplejwt's :class:`TokenBackend`.
The default lifetime comes from configuration as a raw string such as
``"30d"``; anything that cannot be read as a duration falls back to
:data:`DEFAULT_TTL` without failing issuance.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

from django.conf import settings
from jwt.exceptions import PyJWTError
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError
from rest_framework_simplejwt.utils import aware_utcnow, datetime_to_epoch

from registry.exceptions import InternalError

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=30)
MAX_TTL = timedelta(days=3650)

_TTL_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([smhdw]?)\s*$', re.IGNORECASE)
_TTL_UNITS = {
    '': 'seconds',
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
    'w': 'weeks',
}

TTLValue = Union[timedelta, int, float, str, None]


def parse_ttl(value: TTLValue, default: timedelta = DEFAULT_TTL) -> timedelta:
    """Read a token lifetime, returning ``default`` for unusable values.

    Accepts a :class:`timedelta`, a non-negative number of seconds, or a
    string like ``"3600"``, ``"15m"``, ``"12h"`` or ``"30d"``.  Lifetimes
    beyond :data:`MAX_TTL` count as unusable.
    """
    ttl = None
    if isinstance(value, timedelta):
        ttl = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            ttl = timedelta(seconds=value)
        except (OverflowError, ValueError):
            ttl = None
    elif isinstance(value, str):
        m = _TTL_RE.match(value)
        if m:
            amount, unit = m.groups()
            try:
                ttl = timedelta(**{_TTL_UNITS[unit.lower()]: float(amount)})
            except OverflowError:
                ttl = None
    if ttl is None or ttl < timedelta(0) or ttl > MAX_TTL:
        return default
    return ttl


@dataclass(frozen=True)
class SessionClaims:
    subject_id: str
    role: str


class SessionTokenIssuer:
    TOKEN_TYPE = 'access'

    def __init__(self, signing_key: str, *, algorithm: str = 'HS256', ttl: TTLValue = None):
        self.backend = TokenBackend(algorithm, signing_key=signing_key)
        self.default_ttl = parse_ttl(ttl)

    @classmethod
    def from_settings(cls) -> 'SessionTokenIssuer':
        conf = getattr(settings, 'SESSION_TOKEN', {})
        return cls(
            conf.get('SIGNING_KEY') or settings.SECRET_KEY,
            algorithm=conf.get('ALGORITHM', 'HS256'),
            ttl=conf.get('TTL'),
        )

    def issue(self, subject_id, role: str, ttl: TTLValue = None) -> str:
        lifetime = self.default_ttl if ttl is None else parse_ttl(ttl, self.default_ttl)
        now = aware_utcnow()
        payload = {
            'token_type': self.TOKEN_TYPE,
            'user_id': str(subject_id),
            'role': role,
            'iat': datetime_to_epoch(now),
            'exp': datetime_to_epoch(now + lifetime),
            'jti': uuid.uuid4().hex,
        }
        try:
            return self.backend.encode(payload)
        except (PyJWTError, TokenBackendError, TypeError, ValueError) as exc:
            logger.error('Session token signing failed: %s', exc.__class__.__name__)
            raise InternalError('Could not issue session token') from exc

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        """Return the token's claims, or ``None`` if it is unusable.

        Signature mismatch, corruption, missing claims and expiry all
        come back as ``None``.
        """
        if not token:
            return None
        try:
            payload = self.backend.decode(token, verify=True)
        except TokenBackendError:
            return None
        subject_id = payload.get('user_id')
        role = payload.get('role')
        if payload.get('token_type') != self.TOKEN_TYPE or not subject_id or not role or 'exp' not in payload:
            return None
        return SessionClaims(subject_id=str(subject_id), role=str(role))
