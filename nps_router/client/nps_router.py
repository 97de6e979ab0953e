"""
Simplified client interface for the NPS router.

This module provides a clean API for operators and survey pages
without dealing with internal wiring.
"""
import json
from typing import Any, Dict, List, Optional

from nps_router.domains.campaigns import Campaign, default_campaign
from nps_router.domains.errors import CampaignNotFoundError
from nps_router.domains.responses import NPSSummary
from nps_router.factories.app_factory import NPSRouterFactory
from nps_router.interfaces.providers.navigation import Navigator
from nps_router.services.export import responses_to_csv
from nps_router.services.portable import portable_link
from nps_router.services.route_parser import survey_link
from nps_router.services.submission import SurveySession
from nps_router.services.survey_resolver import SurveyResolution


class NPSRouter:
    """Simplified client interface for campaigns, surveys and the dashboard."""

    def __init__(
        self,
        config_path: str = None,
        config: Dict[str, Any] = None,
        navigator: Optional[Navigator] = None,
    ):
        """Initialize the NPS router from config file or dictionary.

        Args:
            config_path: Path to a JSON configuration file
            config: Configuration dictionary
            navigator: Optional navigator used for redirects
        """
        if config is None and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)

        components = NPSRouterFactory.create_from_config(config, navigator=navigator)
        self.store = components.store
        self.survey_service = components.survey_service
        self.nps_service = components.nps_service
        self.base_url = components.base_url
        self.token_key = components.token_key

    # Campaign management

    def list_campaigns(self) -> List[Campaign]:
        return self.store.list_campaigns()

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        return self.store.get_campaign(campaign_id)

    def create_campaign(self, **fields: Any) -> Campaign:
        """Add a campaign built from the default factory.

        Args:
            **fields: Field overrides (snake_case names)

        Returns:
            The stored campaign
        """
        return self.store.add_campaign(default_campaign(**fields))

    def update_campaign(self, campaign_id: str, **fields: Any) -> Campaign:
        """Replace a campaign with a copy carrying the given field changes."""
        current = self.store.get_campaign(campaign_id)
        if current is None:
            raise CampaignNotFoundError(campaign_id)
        data = current.model_dump()
        data.update(fields)
        data["id"] = campaign_id
        return self.store.update_campaign(Campaign(**data))

    def delete_campaign(self, campaign_id: str) -> None:
        self.store.delete_campaign(campaign_id)

    # Links

    def survey_link(self, campaign_id: str, params: Optional[Dict[str, str]] = None) -> str:
        return survey_link(self.base_url, campaign_id, params)

    def portable_link(self, campaign_id: str) -> str:
        """Self-contained link that works where the campaign is not stored."""
        campaign = self.store.get_campaign(campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return portable_link(self.base_url, campaign, self.token_key)

    # Surveys

    def resolve(self, locator: str) -> SurveyResolution:
        return self.survey_service.resolve(locator)

    def open_survey(
        self, locator: str, metadata: Optional[Dict[str, Any]] = None
    ) -> SurveySession:
        return self.survey_service.open_session(locator, metadata)

    async def shutdown(self) -> None:
        """Wait for pending webhook notifications."""
        await self.survey_service.wait_for_notifications()

    # Dashboard

    def dashboard(self, campaign_id: Optional[str] = None) -> NPSSummary:
        return self.nps_service.calculate_nps_score(campaign_id)

    def distribution(self, campaign_id: Optional[str] = None) -> Dict[int, int]:
        return self.nps_service.get_nps_distribution(campaign_id)

    def export_csv(self, campaign_id: Optional[str] = None) -> str:
        """CSV of the (optionally filtered) responses, newest first."""
        campaigns = {c.id: c for c in self.store.list_campaigns()}
        return responses_to_csv(self.store.list_responses(campaign_id), campaigns)
