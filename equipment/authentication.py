"""
Token authentication for the API.

A thin subclass of Django REST framework's ``TokenAuthentication`` kept
in its own module so the settings can reference it without importing
any view code during framework initialisation.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>``; the front-end also sends ``Bearer``
    for the same key, which is accepted here when it is not a JWT."""

    keyword = 'Token'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if len(header) == 2 and header[0].lower() == b'bearer' and header[1].count(b'.') != 2:
            return self.authenticate_credentials(header[1].decode())
        return super().authenticate(request)
