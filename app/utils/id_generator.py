"""
Utility functions for generating consistent display codes for entities.
"""


def generate_kos_code(kos_id: int) -> str:
    """
    Generate a formatted kos code in the format KOS-XXXX.

    Args:
        kos_id (int): The numeric ID of the kos

    Returns:
        str: A formatted kos code (e.g., KOS-0001)
    """
    return f"KOS-{kos_id:04d}"


def generate_booking_code(booking_id: int) -> str:
    """
    Generate a formatted booking code in the format BKG-XXXX.

    Args:
        booking_id (int): The numeric ID of the booking

    Returns:
        str: A formatted booking code (e.g., BKG-0001)
    """
    return f"BKG-{booking_id:04d}"
