# services/marketplace-service/src/apps/core/models/__init__.py
"""
Marketplace Service Models
"""

from .business import Business
from .service import Service
from .availability import Availability, TimeOff
from .booking import Booking
from .review import Review
from .customer import CustomerProfile, Communication
from .photo import BusinessPhoto

__all__ = [
    'Business',
    'Service',
    'Availability',
    'TimeOff',
    'Booking',
    'Review',
    'CustomerProfile',
    'Communication',
    'BusinessPhoto',
]
