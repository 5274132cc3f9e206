import secrets
import string
import time
from typing import Callable, Optional

from src.config import settings

BASE36_ALPHABET = string.digits + string.ascii_uppercase

def generate_booking_reference(
    prefix: Optional[str] = None,
    clock: Callable[[], float] = time.time
) -> str:
    """Human-shareable booking reference, e.g. ``TRNB41234567X9QZ``.

    Prefix, last 8 digits of the millisecond clock, then 4 random base-36
    characters. Uniqueness is probabilistic; the bookings table enforces it.
    """
    prefix = prefix or settings.BOOKING_REFERENCE_PREFIX
    millis = str(int(clock() * 1000))[-8:].zfill(8)
    suffix = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"{prefix}{millis}{suffix}"
