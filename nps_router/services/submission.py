"""
Survey submission and redirect engine.

A SurveySession walks one visit through Idle -> Scored -> Submitted ->
Redirecting. Responses are persisted before the webhook is notified, and
the webhook call runs as a detached task that nothing waits on.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Set

from nps_router.domains.campaigns import Campaign
from nps_router.domains.errors import (
    InvalidTransitionError,
    ScoreValidationError,
    SurveyUnavailableError,
)
from nps_router.domains.responses import Response, ScoreBand, classify_score
from nps_router.interfaces.providers.navigation import Navigator
from nps_router.interfaces.providers.webhook import WebhookProvider
from nps_router.interfaces.repositories.store import CampaignResponseRepository
from nps_router.services.portable import DEFAULT_TOKEN_KEY
from nps_router.services.redirect import compute_redirect
from nps_router.services.route_parser import DASHBOARD, parse_route, survey_campaign_id
from nps_router.services.survey_resolver import SurveyResolution, resolve_survey

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """States of a survey visit."""
    IDLE = "idle"
    SCORED = "scored"
    SUBMITTED = "submitted"
    REDIRECTING = "redirecting"


def validate_score(score: Any) -> int:
    """Return ``score`` if it is an integer in 0-10, else raise ScoreValidationError."""
    if score is None:
        raise ScoreValidationError("Please choose a score from 0 to 10.")
    if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 10:
        raise ScoreValidationError("NPS score must be between 0 and 10")
    return score


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SurveySession:
    """One respondent's visit to a survey."""

    def __init__(
        self,
        campaign: Campaign,
        route_params: Mapping[str, str],
        service: "SurveyService",
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.campaign = campaign
        self.route_params: Dict[str, str] = dict(route_params)
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.service = service
        self.state = SessionState.IDLE
        self.score: Optional[int] = None
        self.response: Optional[Response] = None
        self.redirect_url: Optional[str] = None

    @property
    def band(self) -> Optional[ScoreBand]:
        """Band of the chosen score, if any."""
        return classify_score(self.score) if self.score is not None else None

    def select_score(self, score: int) -> None:
        """Hold a score pending submission."""
        if self.state not in (SessionState.IDLE, SessionState.SCORED):
            raise InvalidTransitionError(f"Cannot change score once {self.state.value}")
        self.score = validate_score(score)
        self.state = SessionState.SCORED

    async def submit(
        self, comment: Optional[str] = None, email: Optional[str] = None
    ) -> Response:
        """Validate, persist and announce the response.

        Args:
            comment: Optional free text
            email: Respondent email; None keeps the one the survey link
                carried in its ``email`` parameter

        Returns:
            The stored response

        Raises:
            ScoreValidationError: No valid score was chosen; nothing is stored
        """
        if self.state not in (SessionState.IDLE, SessionState.SCORED):
            raise InvalidTransitionError(f"Survey already {self.state.value}")
        if not self.campaign.is_active:
            raise SurveyUnavailableError(self.campaign.id, DASHBOARD)
        score = validate_score(self.score)
        if email is None:
            email = self.route_params.get("email")

        response = Response(
            campaign_id=self.campaign.id,
            score=score,
            comment=_clean(comment),
            email=_clean(email),
            metadata=self.metadata,
            route_params=self.route_params,
        )
        self.service.repository.add_response(response)
        self.response = response
        self.state = SessionState.SUBMITTED

        if self.campaign.webhook_url.strip():
            self.service.notify(self.campaign.webhook_url.strip(), response)

        return response

    def redirect(self) -> Optional[str]:
        """Navigate to the band's destination.

        Returns:
            The URL navigated to, or None when the band has no destination
            and the thank-you view stays in place
        """
        if self.state != SessionState.SUBMITTED:
            raise InvalidTransitionError(f"Cannot redirect while {self.state.value}")

        url = compute_redirect(
            self.campaign,
            self.response.score,
            self.response.email,
            self.route_params,
            self.service.app_base_url,
            self.service.token_key,
        )
        if url is None:
            return None

        self.redirect_url = url
        self.state = SessionState.REDIRECTING
        self.service.navigator.replace(url)
        return url


class SurveyService:
    """Opens survey sessions and dispatches webhook notifications."""

    def __init__(
        self,
        repository: CampaignResponseRepository,
        webhook: WebhookProvider,
        navigator: Navigator,
        app_base_url: str = "http://localhost/",
        token_key: str = DEFAULT_TOKEN_KEY,
    ):
        """Initialize the survey service.

        Args:
            repository: Campaign and response store
            webhook: Webhook provider for submission notifications
            navigator: Performs redirects
            app_base_url: URL of the application, for internal destinations
            token_key: Query key reserved for portable tokens
        """
        self.repository = repository
        self.webhook = webhook
        self.navigator = navigator
        self.app_base_url = app_base_url
        self.token_key = token_key
        self._pending: Set[asyncio.Task] = set()

    def resolve(self, locator: str) -> SurveyResolution:
        """Resolve the campaign a survey locator points at."""
        route = parse_route(locator)
        return resolve_survey(
            survey_campaign_id(route.path), route.params, self.repository, self.token_key
        )

    def open_session(
        self, locator: str, metadata: Optional[Dict[str, Any]] = None
    ) -> SurveySession:
        """Start a survey visit.

        Args:
            locator: Hash locator of the survey, e.g. ``#/survey/<id>?email=...``
            metadata: Client context such as user agent and language

        Returns:
            New session in the IDLE state

        Raises:
            SurveyUnavailableError: Campaign not found or inactive
        """
        route = parse_route(locator)
        resolution = self.resolve(locator)
        if not resolution.available:
            logger.info(f"Survey unavailable for locator {locator!r}")
            raise SurveyUnavailableError(survey_campaign_id(route.path), DASHBOARD)
        return SurveySession(resolution.campaign, route.params, self, metadata)

    def notify(self, url: str, response: Response) -> asyncio.Task:
        """Post the response to a webhook without waiting for it."""
        payload = response.model_dump(mode="json", by_alias=True)
        task = asyncio.get_running_loop().create_task(self._post(url, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _post(self, url: str, payload: Dict[str, Any]) -> None:
        try:
            await self.webhook.post_json(url, payload)
        except Exception as e:
            logger.warning(f"Webhook notification to {url} failed: {e}")

    async def wait_for_notifications(self) -> None:
        """Wait for in-flight webhook notifications, e.g. before shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
