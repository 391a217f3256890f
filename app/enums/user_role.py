from enum import Enum


class UserRole(str, Enum):
    """Enum for the roles a marketplace account can hold"""

    ADMIN = "ADMIN"
    SELLER = "SELLER"
    RENTER = "RENTER"

    def __str__(self):
        return self.value
