"""
NPS (Net Promoter Score) service implementation.

This service aggregates responses into promoter, passive and detractor
counts and the NPS score. Figures are recomputed on every call.
"""
import math
from fractions import Fraction
from typing import Dict, Iterable, Optional

from nps_router.domains.responses import NPSSummary, Response, ScoreBand, classify_score
from nps_router.interfaces.repositories.store import CampaignResponseRepository


def round_half_away_from_zero(value: Fraction) -> int:
    """Round to the nearest integer, ties away from zero."""
    magnitude = math.floor(abs(value) + Fraction(1, 2))
    return magnitude if value >= 0 else -magnitude


def calculate_nps(responses: Iterable[Response]) -> NPSSummary:
    """Calculate full NPS metrics for a set of responses.

    Args:
        responses: Responses to aggregate

    Returns:
        Counts per band, percentages and the rounded NPS (0 when empty)
    """
    counts = {band: 0 for band in ScoreBand}
    for response in responses:
        counts[classify_score(response.score)] += 1

    promoters = counts[ScoreBand.PROMOTER]
    passives = counts[ScoreBand.PASSIVE]
    detractors = counts[ScoreBand.DETRACTOR]
    total = promoters + passives + detractors

    if total == 0:
        return NPSSummary()

    return NPSSummary(
        total=total,
        promoters=promoters,
        passives=passives,
        detractors=detractors,
        promoter_percent=promoters / total * 100,
        passive_percent=passives / total * 100,
        detractor_percent=detractors / total * 100,
        nps=round_half_away_from_zero(Fraction(promoters - detractors, total) * 100),
    )


class NPSService:
    """Service for dashboard NPS figures."""

    def __init__(self, repository: CampaignResponseRepository):
        """Initialize the NPS service.

        Args:
            repository: Repository holding campaigns and responses
        """
        self.repository = repository

    def calculate_nps_score(self, campaign_id: Optional[str] = None) -> NPSSummary:
        """Calculate NPS metrics, optionally for a single campaign."""
        return calculate_nps(self.repository.list_responses(campaign_id))

    def get_nps_distribution(self, campaign_id: Optional[str] = None) -> Dict[int, int]:
        """Get distribution of scores.

        Args:
            campaign_id: Optional campaign filter

        Returns:
            Dictionary mapping every score 0-10 to its count
        """
        distribution = {score: 0 for score in range(11)}
        for response in self.repository.list_responses(campaign_id):
            distribution[response.score] += 1
        return distribution

    def summaries_by_campaign(self) -> Dict[str, NPSSummary]:
        """NPS metrics for each stored campaign, keyed by campaign id."""
        return {
            campaign.id: self.calculate_nps_score(campaign.id)
            for campaign in self.repository.list_campaigns()
        }
