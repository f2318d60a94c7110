# shared/common/permissions.py
"""
Custom Permission Classes for Role-Based Access Control (RBAC)
"""

from typing import List
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView
import logging

from .exceptions import UnauthorizedException

logger = logging.getLogger(__name__)


class BasePermission(permissions.BasePermission):
    """Base permission class with utility methods"""

    def get_user_roles(self, request: Request) -> List[str]:
        """Get roles from user object or JWT payload"""
        if hasattr(request.user, 'roles'):
            return request.user.roles
        if hasattr(request, 'auth') and isinstance(request.auth, dict):
            return request.auth.get('roles', [])
        return []


class HasRole(BasePermission):
    """
    Check if user has required role(s).

    Anonymous requests fall through to DRF's 401. An authenticated user
    without the role also gets a 401 rather than a 403, so a wrong-role
    session looks the same as no session.
    """

    required_roles: List[str] = []
    require_all: bool = False  # If True, user must have ALL roles

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not request.user or not request.user.is_authenticated:
            return False

        user_roles = self.get_user_roles(request)

        if self.require_all:
            allowed = set(self.required_roles).issubset(set(user_roles))
        else:
            allowed = bool(set(self.required_roles) & set(user_roles))

        if not allowed:
            logger.warning(
                f"Role check failed for user {getattr(request.user, 'id', None)}",
                extra={'required_roles': self.required_roles, 'path': request.path}
            )
            raise UnauthorizedException('Unauthorized')

        return True

