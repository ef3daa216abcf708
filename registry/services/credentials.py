from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth.hashers import check_password, make_password

from registry.exceptions import InternalError

logger = logging.getLogger(__name__)


class CredentialHasher:
    """Salted one-way hashing for user passwords and hospital role secrets.

    Backed by Django's ``PASSWORD_HASHERS``; every call to :meth:`hash`
    draws a fresh salt, so hashing the same secret twice yields different
    digests.
    """

    def hash(self, secret: str) -> str:
        if not isinstance(secret, str) or not secret:
            # make_password(None) would silently produce an unusable digest
            raise InternalError('Could not hash credential')
        try:
            return make_password(secret)
        except (TypeError, ValueError) as exc:
            logger.error('Credential hashing failed: %s', exc.__class__.__name__)
            raise InternalError('Could not hash credential') from exc

    def verify(self, secret: Optional[str], digest: Optional[str]) -> bool:
        if not secret or not digest:
            return False
        return check_password(secret, digest)
