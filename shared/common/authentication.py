# shared/common/authentication.py
"""
JWT Authentication

Bearer tokens are issued by the external identity provider. Services
only verify them and expose the claims as a lightweight user object;
there is no local user table.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import jwt
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ['exp', 'iat', 'sub', 'iss']


class JWTAuthentication(authentication.BaseAuthentication):
    """
    ``Authorization: Bearer <token>`` authentication.

    Requests without the header, or with another scheme, are left
    anonymous; a Bearer header with a bad token is rejected with 401.
    Algorithm, key and issuer come from ``settings.JWT_SETTINGS``.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple['TokenUser', Dict[str, Any]]]:
        token = self.get_raw_token(request)
        if token is None:
            return None

        payload = self.decode(token)
        return TokenUser(payload), payload

    def get_raw_token(self, request: Request) -> Optional[str]:
        parts = authentication.get_authorization_header(request).split()

        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        if len(parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        try:
            return parts[1].decode('utf-8')
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

    def decode(self, token: str) -> Dict[str, Any]:
        config = settings.JWT_SETTINGS
        try:
            return jwt.decode(
                token,
                config['VERIFYING_KEY'],
                algorithms=[config['ALGORITHM']],
                issuer=config['ISSUER'],
                options={'require': REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    Session user built from token claims.

    ``sub`` is the user id. Roles come from a ``roles`` list or a single
    ``role`` claim.
    """

    is_active = True
    is_authenticated = True
    is_anonymous = False

    def __init__(self, payload: Dict[str, Any]):
        self.payload = payload
        self.id = payload.get('sub')
        self.email = payload.get('email')
        self.name = payload.get('name')
        self.phone = payload.get('phone')
        self.roles = self._roles_from(payload)

    @staticmethod
    def _roles_from(payload: Dict[str, Any]) -> List[str]:
        if payload.get('roles') is not None:
            return list(payload['roles'])
        return [payload['role']] if payload.get('role') else []

    def __str__(self) -> str:
        return f"TokenUser({self.id}, {self.email})"

    def has_role(self, role: str) -> bool:
        return role in self.roles
