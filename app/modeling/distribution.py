from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from app.modeling.money import BP_SCALE, div_round_half_up


@dataclass(frozen=True)
class TimeDistribution:
    """Share of a quarter's opportunities landing in Q, Q+1 and Q+2 (basis points)."""

    same_quarter_bp: int = 8900
    next_quarter_bp: int = 1000
    two_quarter_bp: int = 100

    @property
    def weights(self) -> Tuple[int, int, int]:
        return (self.same_quarter_bp, self.next_quarter_bp, self.two_quarter_bp)

    @property
    def total_bp(self) -> int:
        return sum(self.weights)

    @property
    def is_normalized(self) -> bool:
        return self.total_bp == BP_SCALE

    def shifted(self, same: int = 0, nxt: int = 0, two: int = 0) -> "TimeDistribution":
        """Additive basis-point shift. Each weight is clamped to 0..10000; the
        sum is not renormalised."""
        return TimeDistribution(
            same_quarter_bp=_clamp_bp(self.same_quarter_bp + same),
            next_quarter_bp=_clamp_bp(self.next_quarter_bp + nxt),
            two_quarter_bp=_clamp_bp(self.two_quarter_bp + two),
        )


DEFAULT_DISTRIBUTION = TimeDistribution()


def _clamp_bp(value: int) -> int:
    return max(0, min(BP_SCALE, value))


def split_cohort(
    amount: int, distribution: TimeDistribution, method: str = "independent"
) -> Tuple[int, int, int]:
    """Split a non-negative cohort across (Q, Q+1, Q+2).

    ``independent`` rounds each bucket half up on its own, so the parts may
    not add back to ``amount``. ``largest_remainder`` floors every bucket and
    hands the leftover units to the largest fractional parts, keeping the
    total equal to ``round(amount * total_bp / 10000)``.
    """
    if method == "independent":
        same, nxt, two = (div_round_half_up(amount * w, BP_SCALE) for w in distribution.weights)
        return (same, nxt, two)
    if method == "largest_remainder":
        return _largest_remainder(amount, distribution)
    raise ValueError(f"unknown split method: {method}")


def _largest_remainder(amount: int, distribution: TimeDistribution) -> Tuple[int, int, int]:
    floors = []
    remainders = []
    for idx, w in enumerate(distribution.weights):
        q, r = divmod(amount * w, BP_SCALE)
        floors.append(q)
        remainders.append((r, -idx))
    target = div_round_half_up(amount * distribution.total_bp, BP_SCALE)
    leftover = target - sum(floors)
    for _, neg_idx in sorted(remainders, reverse=True)[: max(leftover, 0)]:
        floors[-neg_idx] += 1
    return (floors[0], floors[1], floors[2])
