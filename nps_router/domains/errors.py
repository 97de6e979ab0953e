"""
Errors raised across the NPS router.
"""
from typing import Optional


class ScoreValidationError(ValueError):
    """Submitted score is missing, not an integer, or outside 0-10."""


class SurveyUnavailableError(LookupError):
    """Campaign could not be resolved or is inactive."""

    def __init__(self, campaign_id: Optional[str], dashboard: str = "#/"):
        self.campaign_id = campaign_id
        self.dashboard = dashboard
        super().__init__("This survey is not available.")


class InvalidTransitionError(RuntimeError):
    """Survey session action not allowed in its current state."""


class CampaignNotFoundError(KeyError):
    """No stored campaign with the given id."""
