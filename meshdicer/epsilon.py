"""
Epsilon-tolerant arithmetic shared by every geometric decision.
"""

import math
from dataclasses import dataclass
from enum import Enum


DEFAULT_EPSILON = 1e-5


class Sign(Enum):
    """Side of a plane a point lies on."""
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1

    def invert(self) -> "Sign":
        return Sign(-self.value)


@dataclass(frozen=True)
class EpsilonMath:
    """
    Tolerant sign classification and integer snapping.

    One instance should be used for a whole run so that plane incidence,
    snapping and floor/ceil decisions agree with each other.
    """
    epsilon: float = DEFAULT_EPSILON

    def __post_init__(self):
        if not (self.epsilon > 0 and math.isfinite(self.epsilon)):
            raise ValueError(f"Epsilon must be a positive finite number, got {self.epsilon}")

    def sign(self, value: float) -> Sign:
        if value < -self.epsilon:
            return Sign.NEGATIVE
        elif value > self.epsilon:
            return Sign.POSITIVE
        else:
            return Sign.ZERO

    def floor(self, value: float) -> int:
        """Floor that snaps values just below an integer up to it."""
        return math.floor(value + self.epsilon)

    def ceil(self, value: float) -> int:
        """Ceil that snaps values just above an integer down to it."""
        return math.ceil(value - self.epsilon)

    def are_same(self, a, b) -> bool:
        """Whether two points (Vec3d) are closer than epsilon."""
        return (a - b).length_squared() < self.epsilon * self.epsilon

    def is_zero(self, vec) -> bool:
        return vec.length_squared() < self.epsilon * self.epsilon
