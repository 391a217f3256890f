from .user_model import User
from .kos_model import Kos
from .booking_model import Booking
from .review_model import Review
from .favorite_model import Favorite

__all__ = ["User", "Kos", "Booking", "Review", "Favorite"]
