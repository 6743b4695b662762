# Paystack amounts are integers in the currency's minor unit (kobo for NGN).
MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: float) -> int:
    return int(round(amount * MINOR_UNITS_PER_MAJOR))


def to_major_units(amount: int) -> float:
    return amount / MINOR_UNITS_PER_MAJOR
