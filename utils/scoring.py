import math

MIN_BAND = 0.0
MAX_BAND = 9.0


def validate_band(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    if not (MIN_BAND <= value <= MAX_BAND):
        raise ValueError(f"{name} must be between 0 and 9")
    return float(value)


def overall_band(listening, reading, writing, speaking) -> float:
    """Average of the four module bands rounded to the IELTS half band.

    A fractional part below .25 rounds down, below .75 becomes .5,
    anything higher rounds up to the next whole band.
    """
    avg = (listening + reading + writing + speaking) / 4
    whole = math.floor(avg)
    frac = avg - whole
    if frac < 0.25:
        return float(whole)
    if frac < 0.75:
        return whole + 0.5
    return float(whole + 1)
