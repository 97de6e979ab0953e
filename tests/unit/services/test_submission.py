"""
Tests for the survey submission and redirect engine.

This module tests SurveySession state transitions, persistence ordering,
fire-and-forget webhook dispatch and redirects.
"""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from nps_router.adapters.navigation_adapter import RecordingNavigator
from nps_router.adapters.storage_adapter import MemoryStorageAdapter
from nps_router.domains import (
    InvalidTransitionError,
    ScoreValidationError,
    SurveyUnavailableError,
    default_campaign,
)
from nps_router.repositories.store import CampaignResponseStore
from nps_router.services.portable import encode_portable
from nps_router.services.submission import SessionState, SurveyService, validate_score


# ---------------------
# Fixtures
# ---------------------

@pytest.fixture
def store():
    """Return an in-memory store with an active and an inactive campaign."""
    store = CampaignResponseStore(MemoryStorageAdapter())
    store.add_campaign(default_campaign(
        id="active",
        promoter_url="https://reviews.example/leave",
        passive_url="",
        detractor_url="example.com/fix",
        webhook_url="https://hooks.example/nps",
    ))
    store.add_campaign(default_campaign(id="inactive", is_active=False))
    return store


@pytest.fixture
def webhook():
    """Return a mock webhook provider."""
    provider = Mock()
    provider.post_json = AsyncMock(return_value=None)
    return provider


@pytest.fixture
def navigator():
    """Return a recording navigator."""
    return RecordingNavigator()


@pytest.fixture
def service(store, webhook, navigator):
    """Return a survey service with mocked collaborators."""
    return SurveyService(
        repository=store,
        webhook=webhook,
        navigator=navigator,
        app_base_url="https://nps.example/",
    )


# ---------------------
# Score Validation Tests
# ---------------------

@pytest.mark.parametrize("score", [None, -1, 11, 5.0, "5", True])
def test_validate_score_rejects(score):
    """Test that only integers 0-10 are accepted."""
    with pytest.raises(ScoreValidationError):
        validate_score(score)


@pytest.mark.parametrize("score", [0, 6, 10])
def test_validate_score_accepts(score):
    """Test valid scores."""
    assert validate_score(score) == score


# ---------------------
# Opening Tests
# ---------------------

def test_open_session(service):
    """Test opening a session for a stored campaign."""
    session = service.open_session("#/survey/active?utm_source=mail", {"language": "fr"})

    assert session.state == SessionState.IDLE
    assert session.campaign.id == "active"
    assert session.route_params == {"utm_source": "mail"}
    assert session.metadata == {"language": "fr"}


@pytest.mark.parametrize("locator", ["#/survey/missing", "#/survey/inactive", "#/"])
def test_open_unavailable(service, locator):
    """Test that unknown and inactive campaigns are unavailable."""
    with pytest.raises(SurveyUnavailableError) as excinfo:
        service.open_session(locator)

    assert excinfo.value.dashboard == "#/"
    assert "not available" in str(excinfo.value)


def test_open_portable_session(service, store):
    """Test opening a survey only known through its portable token."""
    token = encode_portable(default_campaign(brand_name="Traveller"))

    session = service.open_session(f"#/survey/elsewhere?c={token}")

    assert session.campaign.ephemeral
    assert session.campaign.brand_name == "Traveller"
    assert store.get_campaign("elsewhere") is None


# ---------------------
# Transition Tests
# ---------------------

def test_select_score(service):
    """Test Idle -> Scored, and changing the score while Scored."""
    session = service.open_session("#/survey/active")

    session.select_score(4)
    session.select_score(9)

    assert session.state == SessionState.SCORED
    assert session.score == 9


def test_select_invalid_score_keeps_state(service):
    """Test that an invalid pick leaves the session untouched."""
    session = service.open_session("#/survey/active")

    with pytest.raises(ScoreValidationError):
        session.select_score(12)

    assert session.state == SessionState.IDLE
    assert session.score is None


@pytest.mark.asyncio
async def test_submit_without_score(service, store):
    """Test that submitting without a score stores nothing."""
    session = service.open_session("#/survey/active")

    with pytest.raises(ScoreValidationError):
        await session.submit()

    assert session.state == SessionState.IDLE
    assert store.list_responses() == []


@pytest.mark.asyncio
async def test_submit_persists_response(service, store, webhook):
    """Test Scored -> Submitted."""
    session = service.open_session(
        "#/survey/active?utm_source=mail&c=tok", {"userAgent": "pytest"}
    )
    session.select_score(8)

    response = await session.submit(comment="  fine  ", email="  ")
    await service.wait_for_notifications()

    assert session.state == SessionState.SUBMITTED
    assert response.score == 8
    assert response.campaign_id == "active"
    assert response.comment == "fine"
    assert response.email is None
    assert response.metadata == {"userAgent": "pytest"}
    assert response.route_params == {"utm_source": "mail", "c": "tok"}
    assert store.list_responses()[0] == response


@pytest.mark.asyncio
async def test_link_email_prefills_response(service, store):
    """Test that the email carried by the survey link is kept when none is typed."""
    session = service.open_session("#/survey/active?email=link%40example.com")
    session.select_score(10)

    response = await session.submit()
    url = session.redirect()

    assert response.email == "link@example.com"
    assert store.list_responses()[0].email == "link@example.com"
    assert url == "https://reviews.example/leave?email=link%40example.com"


@pytest.mark.asyncio
async def test_typed_email_replaces_link_email(service):
    """Test that an email given on submit wins, and a blank one clears it."""
    typed = service.open_session("#/survey/active?email=link@example.com")
    typed.select_score(9)
    cleared = service.open_session("#/survey/active?email=link@example.com")
    cleared.select_score(9)

    assert (await typed.submit(email="me@example.com")).email == "me@example.com"
    assert (await cleared.submit(email="  ")).email is None


@pytest.mark.asyncio
async def test_submit_twice_is_rejected(service, store):
    """Test that a session submits at most once."""
    session = service.open_session("#/survey/active")
    session.select_score(8)
    await session.submit()

    with pytest.raises(InvalidTransitionError):
        await session.submit()
    with pytest.raises(InvalidTransitionError):
        session.select_score(3)

    assert len(store.list_responses()) == 1


@pytest.mark.asyncio
async def test_submit_after_deactivation_never_stores(service, store):
    """Test that a campaign deactivated mid-visit refuses the response."""
    session = service.open_session("#/survey/active")
    session.campaign = session.campaign.model_copy(update={"is_active": False})
    session.select_score(10)

    with pytest.raises(SurveyUnavailableError):
        await session.submit()

    assert store.list_responses() == []


# ---------------------
# Webhook Tests
# ---------------------

@pytest.mark.asyncio
async def test_webhook_receives_response(service, webhook):
    """Test that the webhook gets the full response as JSON."""
    session = service.open_session("#/survey/active")
    session.select_score(9)

    response = await session.submit(email="a@example.com")
    await service.wait_for_notifications()

    webhook.post_json.assert_awaited_once()
    url, payload = webhook.post_json.call_args[0]
    assert url == "https://hooks.example/nps"
    assert payload["id"] == response.id
    assert payload["campaignId"] == "active"
    assert payload["email"] == "a@example.com"


@pytest.mark.asyncio
async def test_persisted_before_webhook(service, store, webhook):
    """Test that the response is stored before the notification starts."""
    seen = []

    async def record(url, payload):
        seen.append(len(store.list_responses()))

    webhook.post_json = AsyncMock(side_effect=record)
    session = service.open_session("#/survey/active")
    session.select_score(9)

    await session.submit()
    await service.wait_for_notifications()

    assert seen == [1]


@pytest.mark.asyncio
async def test_webhook_failure_does_not_block(service, store, webhook, navigator):
    """Test that a failing webhook neither fails submission nor redirect."""
    webhook.post_json = AsyncMock(side_effect=ConnectionError("unreachable"))
    session = service.open_session("#/survey/active")
    session.select_score(2)

    await session.submit()
    url = session.redirect()
    await service.wait_for_notifications()

    assert len(store.list_responses()) == 1
    assert url == "https://example.com/fix?score=2"
    assert navigator.location == url


@pytest.mark.asyncio
async def test_redirect_does_not_wait_for_webhook(service, webhook, navigator):
    """Test that the redirect happens while the notification is still pending."""
    release = asyncio.Event()

    async def slow(url, payload):
        await release.wait()

    webhook.post_json = AsyncMock(side_effect=slow)
    session = service.open_session("#/survey/active")
    session.select_score(10)

    await session.submit()
    session.redirect()

    assert session.state == SessionState.REDIRECTING
    assert navigator.location is not None
    release.set()
    await service.wait_for_notifications()


@pytest.mark.asyncio
async def test_no_webhook_configured(store, webhook, navigator):
    """Test that campaigns without a webhook URL post nothing."""
    store.add_campaign(default_campaign(id="quiet", webhook_url=""))
    service = SurveyService(store, webhook, navigator)
    session = service.open_session("#/survey/quiet")
    session.select_score(5)

    await session.submit()
    await service.wait_for_notifications()

    webhook.post_json.assert_not_called()


# ---------------------
# Redirect Tests
# ---------------------

def test_redirect_before_submit(service):
    """Test that redirect requires a submitted response."""
    session = service.open_session("#/survey/active")
    session.select_score(9)

    with pytest.raises(InvalidTransitionError):
        session.redirect()


@pytest.mark.asyncio
async def test_external_redirect_leaks_nothing(service, navigator):
    """Test that a third-party destination only receives the email."""
    session = service.open_session(
        "#/survey/active?c=tok&custom=1&utm_source=mail&email=link@example.com"
    )
    session.select_score(9)
    await session.submit(email="me@example.com")

    url = session.redirect()

    assert url == "https://reviews.example/leave?email=me%40example.com"
    assert navigator.history == [url]
    assert session.redirect_url == url


@pytest.mark.asyncio
async def test_empty_band_stays_on_thank_you(service, navigator):
    """Test that a band without URL keeps the thank-you view."""
    session = service.open_session("#/survey/active")
    session.select_score(7)
    await session.submit()

    assert session.redirect() is None
    assert session.state == SessionState.SUBMITTED
    assert navigator.history == []
