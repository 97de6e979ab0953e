"""
Campaign and response store.

Owns the two persisted collections and writes each one back to the
storage provider after every mutation.
"""
import logging
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from nps_router.domains.campaigns import Campaign
from nps_router.domains.errors import CampaignNotFoundError
from nps_router.domains.responses import Response
from nps_router.interfaces.providers.storage import StorageProvider
from nps_router.interfaces.repositories.store import CampaignResponseRepository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

STORAGE_KEYS = {
    "campaigns": "nps_campaigns_v1",
    "responses": "nps_responses_v1",
}


class CampaignResponseStore(CampaignResponseRepository):
    """Storage-backed implementation of CampaignResponseRepository."""

    def __init__(self, storage: StorageProvider):
        """Initialize the store and load both collections.

        Args:
            storage: Key-value storage provider
        """
        self.storage = storage
        self._campaigns: List[Campaign] = self._load(STORAGE_KEYS["campaigns"], Campaign)
        self._responses: List[Response] = self._load(STORAGE_KEYS["responses"], Response)

    def _load(self, key: str, model: Type[T]) -> List[T]:
        raw = self.storage.get(key, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring non-list value stored under {key}")
            return []

        items = []
        for doc in raw:
            try:
                items.append(model.model_validate(doc))
            except ValidationError as e:
                logger.warning(f"Dropping malformed record under {key}: {e}")
        return items

    def _dump(self, items: List[BaseModel]) -> List[Any]:
        return [item.model_dump(mode="json", by_alias=True) for item in items]

    def _persist_campaigns(self) -> None:
        self.storage.set(STORAGE_KEYS["campaigns"], self._dump(self._campaigns))

    def _persist_responses(self) -> None:
        self.storage.set(STORAGE_KEYS["responses"], self._dump(self._responses))

    def _index_of(self, campaign_id: str) -> int:
        for i, campaign in enumerate(self._campaigns):
            if campaign.id == campaign_id:
                return i
        raise CampaignNotFoundError(campaign_id)

    def list_campaigns(self) -> List[Campaign]:
        return list(self._campaigns)

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        try:
            return self._campaigns[self._index_of(campaign_id)]
        except CampaignNotFoundError:
            return None

    def add_campaign(self, campaign: Campaign) -> Campaign:
        if campaign.ephemeral:
            raise ValueError("Ephemeral campaigns cannot be stored")
        if self.get_campaign(campaign.id) is not None:
            raise ValueError(f"Campaign {campaign.id} already exists")

        self._campaigns = self._campaigns + [campaign]
        self._persist_campaigns()
        logger.info(f"Added campaign {campaign.id}")
        return campaign

    def update_campaign(self, campaign: Campaign) -> Campaign:
        if campaign.ephemeral:
            raise ValueError("Ephemeral campaigns cannot be stored")
        index = self._index_of(campaign.id)

        campaigns = list(self._campaigns)
        campaigns[index] = campaign
        self._campaigns = campaigns
        self._persist_campaigns()
        logger.info(f"Updated campaign {campaign.id}")
        return campaign

    def delete_campaign(self, campaign_id: str) -> None:
        index = self._index_of(campaign_id)
        self._campaigns = self._campaigns[:index] + self._campaigns[index + 1:]
        self._persist_campaigns()
        logger.info(f"Deleted campaign {campaign_id}")

    def list_responses(self, campaign_id: Optional[str] = None) -> List[Response]:
        if campaign_id is None:
            return list(self._responses)
        return [r for r in self._responses if r.campaign_id == campaign_id]

    def add_response(self, response: Response) -> Response:
        self._responses = [response] + self._responses
        self._persist_responses()
        return response
