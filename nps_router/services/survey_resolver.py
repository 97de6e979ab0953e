"""
Survey resolution.

Decides which campaign a survey visit presents: the stored one, an
ephemeral one rebuilt from a portable token, or none.
"""
import logging
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel

from nps_router.domains.campaigns import Campaign, default_campaign, new_id
from nps_router.interfaces.repositories.store import CampaignResponseRepository
from nps_router.services.portable import DEFAULT_TOKEN_KEY, decode_portable

logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    """How a survey visit was resolved."""
    STORED = "stored"
    EPHEMERAL = "ephemeral"
    NOT_FOUND = "not_found"


class SurveyResolution(BaseModel):
    """Outcome of resolving a survey visit."""

    status: ResolutionStatus
    campaign: Optional[Campaign] = None

    @property
    def available(self) -> bool:
        """True when a response may be collected."""
        return self.campaign is not None and self.campaign.is_active


def resolve_survey(
    campaign_id: Optional[str],
    params: Mapping[str, str],
    repository: CampaignResponseRepository,
    token_key: str = DEFAULT_TOKEN_KEY,
) -> SurveyResolution:
    """Resolve the campaign to present for a survey visit.

    Args:
        campaign_id: Id taken from the survey path, if any
        params: Route query parameters, possibly holding a portable token
        repository: Stored campaigns
        token_key: Query key reserved for the portable token

    Returns:
        Stored campaign, ephemeral campaign, or NOT_FOUND
    """
    if campaign_id:
        stored = repository.get_campaign(campaign_id)
        if stored is not None:
            return SurveyResolution(status=ResolutionStatus.STORED, campaign=stored)

    portable = decode_portable(params.get(token_key))
    if portable is None:
        logger.info(f"No campaign found for survey {campaign_id!r}")
        return SurveyResolution(status=ResolutionStatus.NOT_FOUND)

    campaign = default_campaign(
        id=campaign_id or new_id(),
        ephemeral=True,
        **portable.provided_fields(),
    )
    logger.info(f"Resolved survey {campaign.id} from a portable token")
    return SurveyResolution(status=ResolutionStatus.EPHEMERAL, campaign=campaign)
