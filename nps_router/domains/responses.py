"""
Response domain models.

These models define a respondent's submission, the score bands derived
from it and the aggregate NPS summary.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nps_router.domains.campaigns import new_id


def utc_timestamp() -> str:
    """Current time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ScoreBand(str, Enum):
    """NPS category of a 0-10 score."""
    PROMOTER = "promoter"
    PASSIVE = "passive"
    DETRACTOR = "detractor"


def classify_score(score: int) -> ScoreBand:
    """Classify a 0-10 score into its band.

    Args:
        score: NPS score

    Returns:
        PROMOTER for 9-10, PASSIVE for 7-8, DETRACTOR for 0-6
    """
    if score >= 9:
        return ScoreBand.PROMOTER
    elif score >= 7:
        return ScoreBand.PASSIVE
    else:
        return ScoreBand.DETRACTOR


class Response(BaseModel):
    """One respondent's submission. Immutable once created."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(default_factory=new_id, description="Unique identifier")
    timestamp: str = Field(
        default_factory=utc_timestamp, description="Submission time (ISO 8601)"
    )
    campaign_id: str = Field(..., description="Campaign that was shown")
    score: int = Field(..., description="NPS score (0-10)", ge=0, le=10, strict=True)
    comment: Optional[str] = Field(None, description="Optional free text")
    email: Optional[str] = Field(None, description="Optional, not validated")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Client context, passed through verbatim"
    )
    route_params: Dict[str, str] = Field(
        default_factory=dict, description="Query parameters present at load time"
    )

    @property
    def band(self) -> ScoreBand:
        """Score band of this response."""
        return classify_score(self.score)


class NPSSummary(BaseModel):
    """Aggregate NPS metrics over a set of responses."""

    total: int = 0
    promoters: int = 0
    passives: int = 0
    detractors: int = 0
    promoter_percent: float = 0.0
    passive_percent: float = 0.0
    detractor_percent: float = 0.0
    nps: int = Field(0, description="Rounded NPS, -100 to 100")
