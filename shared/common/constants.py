"""
Shared Constants Module.

Common constants used across the marketplace services.
"""
from enum import Enum


# =============================================================================
# USER & AUTHENTICATION
# =============================================================================

class UserRole(str, Enum):
    """Roles issued by the identity provider."""
    CUSTOMER = "CUSTOMER"
    BUSINESS_OWNER = "BUSINESS_OWNER"
