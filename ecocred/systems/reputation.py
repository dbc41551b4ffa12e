# ecocred/systems/reputation.py
"""
Pluggable reputation scoring.

A strategy turns a company profile into a multiplier in basis points that
scales the credits minted for its next verified action. 10000 bps leaves the
award unchanged.
"""
import logging
from typing import Dict, Tuple

from ecocred.constants import BPS_DENOMINATOR, ONE_CREDIT
from ecocred.models import CompanyProfile

logger = logging.getLogger(__name__)

MAX_REPUTATION_SCORE = 1000
CREDITS_PER_REPUTATION_POINT = 10


def reputation_score(total_credits_earned: int) -> int:
    """One point per 10 whole credits earned, capped at 1000."""
    points = (total_credits_earned // ONE_CREDIT) // CREDITS_PER_REPUTATION_POINT
    return min(points, MAX_REPUTATION_SCORE)


class ReputationScoring:
    name = "base"

    def score(self, profile: CompanyProfile) -> int:
        raise NotImplementedError


class FlatReputationScoring(ReputationScoring):
    """Every company earns exactly what the verifiers awarded."""
    name = "flat"

    def score(self, profile: CompanyProfile) -> int:
        return BPS_DENOMINATOR


class TieredReputationScoring(ReputationScoring):
    """Established companies earn a bonus on top of the verified award."""
    name = "tiered"

    # (minimum reputation score, multiplier bps), highest tier first.
    TIERS: Tuple[Tuple[int, int], ...] = (
        (750, 11_500),
        (500, 11_000),
        (250, 10_500),
        (0, 10_000),
    )

    def score(self, profile: CompanyProfile) -> int:
        current = profile.reputation_score if profile is not None else 0
        for minimum, multiplier in self.TIERS:
            if current >= minimum:
                return multiplier
        return BPS_DENOMINATOR


STRATEGIES: Dict[str, ReputationScoring] = {
    FlatReputationScoring.name: FlatReputationScoring(),
    TieredReputationScoring.name: TieredReputationScoring(),
}


def get_strategy(name: str) -> ReputationScoring:
    strategy = STRATEGIES.get((name or "flat").lower())
    if strategy is None:
        logger.warning(f"Unknown reputation strategy '{name}'; falling back to flat scoring.")
        return STRATEGIES[FlatReputationScoring.name]
    return strategy
