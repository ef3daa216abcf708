"""
DRF authentication backed by the access guard.

Requests without an ``Authorization: Bearer ...`` header stay anonymous so
public endpoints keep working; a Bearer header that does not resolve to
a live user is rejected with 401.
"""
from __future__ import annotations

from rest_framework import authentication

from registry.exceptions import NotAuthenticated
from registry.services.access import AccessGuard


class SessionTokenAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request)
        parts = header.split()
        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        try:
            header = header.decode()
        except UnicodeError:
            raise NotAuthenticated()
        guard = AccessGuard.from_settings()
        token = guard.extract_token(header)
        return guard.resolve(token), token

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
