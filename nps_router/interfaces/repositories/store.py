from abc import ABC, abstractmethod
from typing import List, Optional

from nps_router.domains.campaigns import Campaign
from nps_router.domains.responses import Response


class CampaignResponseRepository(ABC):
    """Interface for the campaign and response collections."""

    @abstractmethod
    def list_campaigns(self) -> List[Campaign]:
        """Get all stored campaigns in order."""
        pass

    @abstractmethod
    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get a stored campaign by id."""
        pass

    @abstractmethod
    def add_campaign(self, campaign: Campaign) -> Campaign:
        """Append a new campaign."""
        pass

    @abstractmethod
    def update_campaign(self, campaign: Campaign) -> Campaign:
        """Replace the stored campaign with the same id."""
        pass

    @abstractmethod
    def delete_campaign(self, campaign_id: str) -> None:
        """Delete a campaign by id."""
        pass

    @abstractmethod
    def list_responses(self, campaign_id: Optional[str] = None) -> List[Response]:
        """Get responses, newest first, optionally for one campaign."""
        pass

    @abstractmethod
    def add_response(self, response: Response) -> Response:
        """Prepend a response."""
        pass
