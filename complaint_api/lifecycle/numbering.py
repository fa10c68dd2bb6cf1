"""Human-facing complaint numbers."""

import random
import re
import time

PREFIX = "CMP"

COMPLAINT_NUMBER_PATTERN = re.compile(rf"^{PREFIX}\d+$")


def generate_complaint_number() -> str:
    """Return ``CMP`` + epoch milliseconds + three random digits.

    Not guaranteed unique; the ``complaint_number`` column is, so a
    collision fails the insert and the caller retries with a new number.
    """
    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 999)
    return f"{PREFIX}{timestamp}{suffix:03d}"
