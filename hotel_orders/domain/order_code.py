import random
import string
import time
from typing import Callable, Optional

ORDER_CODE_PREFIX = "PH"
TIME_SEGMENT_LENGTH = 6
RANDOM_SEGMENT_LENGTH = 4
RANDOM_ALPHABET = string.ascii_uppercase + string.digits


class OrderCodeGenerator:
    """
    Proposes human-readable order codes: ``PH`` + the last 6 digits of the
    epoch time in milliseconds + 4 random uppercase alphanumerics.

    A code is only a candidate. Two callers in the same millisecond can draw
    the same random segment, so uniqueness is decided by the order store's
    unique constraint when the order is inserted (see OrderService).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.clock = clock
        self.rng = rng or random.SystemRandom()

    def generate(self) -> str:
        millis = str(int(self.clock() * 1000))
        time_segment = millis[-TIME_SEGMENT_LENGTH:].rjust(TIME_SEGMENT_LENGTH, "0")
        random_segment = "".join(self.rng.choice(RANDOM_ALPHABET) for _ in range(RANDOM_SEGMENT_LENGTH))
        return f"{ORDER_CODE_PREFIX}{time_segment}{random_segment}"


def is_well_formed(code: str) -> bool:
    body = code[len(ORDER_CODE_PREFIX):]
    return (
        code.startswith(ORDER_CODE_PREFIX)
        and len(body) == TIME_SEGMENT_LENGTH + RANDOM_SEGMENT_LENGTH
        and body[:TIME_SEGMENT_LENGTH].isdigit()
        and all(ch in RANDOM_ALPHABET for ch in body[TIME_SEGMENT_LENGTH:])
    )
