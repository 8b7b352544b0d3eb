from numbers import Real
from typing import List, Optional, Tuple

from relay.models import RESOURCE_MAX, RESOURCE_MIN, RESOURCE_SLOTS


def validate_resources(vector) -> Tuple[Optional[List[int]], Optional[str]]:
    """Check a resource vector and return ``(normalized, error)``.

    A valid vector is a list or tuple of exactly five integral numbers, each
    within [0, 50]. Integral floats such as ``10.0`` are accepted and stored
    as ints; booleans, strings, fractional values and NaN are rejected.
    Nothing is returned on failure so the caller never applies a partial
    update.
    """
    if not isinstance(vector, (list, tuple)):
        return None, f'expected a list of {RESOURCE_SLOTS} numbers'
    if len(vector) != RESOURCE_SLOTS:
        return None, f'expected {RESOURCE_SLOTS} values, got {len(vector)}'

    normalized: List[int] = []
    for idx, value in enumerate(vector):
        if isinstance(value, bool) or not isinstance(value, Real):
            return None, f'value at index {idx} is not a number: {value!r}'
        if not (RESOURCE_MIN <= value <= RESOURCE_MAX):
            return None, f'value at index {idx} must be between {RESOURCE_MIN} and {RESOURCE_MAX}: {value!r}'
        if int(value) != value:
            return None, f'value at index {idx} must be a whole number: {value!r}'
        normalized.append(int(value))
    return normalized, None
