"""
Campaign domain models.

A campaign describes how one survey is run: its branding, the
destination for each score band and an optional webhook.
"""
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


class Audience(str, Enum):
    """Who a campaign is addressed to."""
    CUSTOMERS = "customers"
    EMPLOYEES = "employees"
    PARTNERS = "partners"


class Campaign(BaseModel):
    """Configuration of a single NPS survey."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    id: str = Field(default_factory=new_id, description="Unique identifier")
    name: str = Field("", description="Display label")
    audience: Audience = Field(
        Audience.CUSTOMERS, validate_default=True, description="Target audience"
    )
    brand_name: str = Field("", description="Brand shown on the survey page")
    accent_color: str = Field("#4f46e5", description="Hex accent color")
    thank_you_message: str = Field("", description="Shown after submission")
    promoter_url: str = Field("", description="Redirect for scores 9-10")
    passive_url: str = Field("", description="Redirect for scores 7-8")
    detractor_url: str = Field("", description="Redirect for scores 0-6")
    webhook_url: str = Field("", description="Notified on each submission")
    is_active: bool = Field(True, description="Inactive campaigns refuse responses")
    ephemeral: bool = Field(
        False,
        exclude=True,
        description="Synthesized from a portable link, never persisted",
    )


# Fields carried by a portable link, in token order.
PORTABLE_FIELDS = (
    "brand_name",
    "accent_color",
    "thank_you_message",
    "promoter_url",
    "passive_url",
    "detractor_url",
    "webhook_url",
    "is_active",
)


class PortableCampaign(BaseModel):
    """Public campaign fields decoded from a portable token.

    Every field is optional; ``None`` means the token did not carry it.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    brand_name: Optional[str] = None
    accent_color: Optional[str] = None
    thank_you_message: Optional[str] = None
    promoter_url: Optional[str] = None
    passive_url: Optional[str] = None
    detractor_url: Optional[str] = None
    webhook_url: Optional[str] = None
    is_active: Optional[bool] = None

    def provided_fields(self) -> Dict[str, Any]:
        """Return only the fields present in the token."""
        return self.model_dump(exclude_none=True)


def default_campaign(**overrides: Any) -> Campaign:
    """Create a campaign pre-populated with example values.

    Args:
        **overrides: Field values (snake_case names) replacing the defaults

    Returns:
        New campaign with a fresh id
    """
    values: Dict[str, Any] = {
        "id": new_id(),
        "name": "New campaign",
        "audience": Audience.CUSTOMERS,
        "brand_name": "Your brand",
        "accent_color": "#4f46e5",
        "thank_you_message": "Thank you for your feedback!",
        "promoter_url": "https://g.page/r/your-review-link/review",
        "passive_url": "https://example.com/feedback",
        "detractor_url": "https://example.com/support",
        "webhook_url": "",
        "is_active": True,
    }
    values.update(overrides)
    return Campaign(**values)
