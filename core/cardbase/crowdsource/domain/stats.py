"""Contributor statistics and trust scoring."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional

from dataclasses import dataclass, field

POINTS_FOR_APPROVAL = 5
"""Trust points awarded when a submission is approved."""

REJECTION_PENALTY = 2
"""Trust points deducted when a submission is rejected."""


class TrustLevel(Enum):
    """Tiers derived from a contributor's trust points."""

    NOVICE = 'novice'
    CONTRIBUTOR = 'contributor'
    TRUSTED = 'trusted'
    EXPERT = 'expert'
    MASTER = 'master'

    @property
    def rank(self) -> int:
        """Position of this tier, starting at 0 for novices."""
        return list(TrustLevel).index(self)

    def at_least(self, other: 'TrustLevel') -> bool:
        """Whether this tier is ``other`` or higher."""
        return self.rank >= other.rank


THRESHOLDS = [
    (500, TrustLevel.MASTER),
    (300, TrustLevel.EXPERT),
    (150, TrustLevel.TRUSTED),
    (50, TrustLevel.CONTRIBUTOR),
    (0, TrustLevel.NOVICE),
]
"""Minimum trust points for each tier, highest first."""


def trust_level_for(points: int) -> TrustLevel:
    """Get the :class:`TrustLevel` for a number of trust points."""
    for minimum, level in THRESHOLDS:
        if points >= minimum:
            return level
    return TrustLevel.NOVICE


def approval_rate(approved: int, rejected: int) -> Optional[float]:
    """
    Percentage of reviewed submissions that were approved.

    Rounded to two decimal places. ``None`` if nothing has been reviewed yet.
    """
    reviewed = approved + rejected
    if reviewed == 0:
        return None
    rate = Decimal(approved * 100) / Decimal(reviewed)
    return float(rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


@dataclass
class ContributorStats:
    """Aggregate submission history for a single contributor."""

    user_id: int
    total_submissions: int = field(default=0)
    pending_submissions: int = field(default=0)
    approved_submissions: int = field(default=0)
    rejected_submissions: int = field(default=0)
    per_kind: Dict[str, int] = field(default_factory=dict)
    """Number of submissions of each :class:`.EntityKind`, by value."""

    trust_points: int = field(default=0)
    trust_level: TrustLevel = field(default=TrustLevel.NOVICE)
    approval_rate: Optional[float] = field(default=None)
    first_submission_at: Optional[datetime] = field(default=None)
    last_submission_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        """Coerce the trust level."""
        if not isinstance(self.trust_level, TrustLevel):
            self.trust_level = TrustLevel(self.trust_level)

    @property
    def reviewed_submissions(self) -> int:
        """Number of submissions that have received a decision."""
        return self.approved_submissions + self.rejected_submissions
