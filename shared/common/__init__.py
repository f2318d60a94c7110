# Shared Common Library for the Beauty Marketplace
# This package contains shared utilities, authentication, permissions,
# and other common components used by the marketplace services.
#
# Modules are imported directly (``from shared.common.cache import cached``)
# so that importing the package never touches Django settings.

__version__ = "1.0.0"

__all__ = [
    '__version__',
]
