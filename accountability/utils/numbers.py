import math


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores and averages round .5 up
    return int(math.floor(value + 0.5))
