"""Record ID generator service.

Generates compact, practically unique record IDs from a random base-36
component followed by the base-36 millisecond timestamp.
"""

import random
import time

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36.

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(35)
        'z'
        >>> to_base36(36)
        '10'
    """
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


class RecordIdGenerator:
    """Generator for record IDs.

    IDs are not cryptographically secure and collisions are improbable rather
    than impossible, which is acceptable for collections of this size.

    Example IDs: k3j9x0q1vz8lmq2z4w, 4f8s2lq7lmq2z9k1
    """

    RANDOM_BITS = 52

    @classmethod
    def generate(cls) -> str:
        random_part = to_base36(random.getrandbits(cls.RANDOM_BITS))
        timestamp_part = to_base36(int(time.time() * 1000))
        return f"{random_part}{timestamp_part}"


def generate_id() -> str:
    """Generate a new record ID."""
    return RecordIdGenerator.generate()
