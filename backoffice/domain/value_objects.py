"""Domain value objects."""

import re
from dataclasses import dataclass
from typing import ClassVar

WILDCARD_SEGMENT = "*"
SEGMENT_SEPARATOR = "."


def permission_matches(held_code: str, required_code: str) -> bool:
    """
    Decide whether a held permission code satisfies a required code.

    Exact equality always matches. When the required code has no wildcard
    segment, nothing else does. Otherwise both codes are split on "." and
    must have the same number of segments; every pattern segment is either
    "*" or identical (case-sensitive) to the held segment. A wildcard covers
    exactly one segment.

    Examples:
        permission_matches("serviceOrder.buyback.read", "serviceOrder.*.read")  # True
        permission_matches("serviceOrder.read", "serviceOrder.*.read")          # False
    """
    if held_code == required_code:
        return True

    pattern_segments = required_code.split(SEGMENT_SEPARATOR)
    if WILDCARD_SEGMENT not in pattern_segments:
        return False

    held_segments = held_code.split(SEGMENT_SEPARATOR)
    if len(held_segments) != len(pattern_segments):
        return False

    return all(
        pattern == WILDCARD_SEGMENT or pattern == held
        for held, pattern in zip(held_segments, pattern_segments)
    )


@dataclass(frozen=True)
class PermissionCode:
    """
    Value object for a dotted hierarchical permission code
    (e.g. 'serviceOrder.buyback.read').

    Stored codes are concrete: each segment starts with a letter and
    contains only letters, digits, underscores or hyphens. Wildcards are
    only valid in the code a caller *requires*, never in a stored one.
    """

    value: str

    SEGMENT_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
    MAX_LENGTH: ClassVar[int] = 100

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Permission code must be a non-empty string")
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"Permission code must not exceed {self.MAX_LENGTH} characters")
        for segment in self.value.split(SEGMENT_SEPARATOR):
            if not self.SEGMENT_PATTERN.match(segment):
                raise ValueError(
                    f"Invalid permission code '{self.value}': segments must be "
                    "alphanumeric (e.g. 'customer.read', 'serviceOrder.buyback.create')"
                )

    def covers(self, required_code: str) -> bool:
        """Return True if holding this code satisfies required_code."""
        return permission_matches(self.value, required_code)

    def __str__(self) -> str:
        return self.value
