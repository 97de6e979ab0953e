"""
Redirect destination computation.

Picks the campaign URL for a score band, normalizes it and applies the
parameter forwarding policy. Third-party destinations only ever receive
the respondent's email; same-origin destinations also receive the
tracking parameters and the score.
"""
import logging
import re
from typing import List, Mapping, Optional, Set, Tuple
from urllib.parse import unquote_plus, urlencode, urljoin, urlsplit, urlunsplit

from pydantic import BaseModel

from nps_router.domains.campaigns import Campaign
from nps_router.domains.responses import ScoreBand, classify_score
from nps_router.services.portable import DEFAULT_TOKEN_KEY

logger = logging.getLogger(__name__)

TRACKING_KEYS = (
    "source",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
)

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_OPAQUE = re.compile(r"^(mailto|tel|sms):", re.IGNORECASE)
_RELATIVE = ("/", "#", "?", ".")


class RedirectTarget(BaseModel):
    """Normalized destination and whether it leaves the application."""

    url: str
    external: bool
    hash_route: bool = False


def band_url(campaign: Campaign, band: ScoreBand) -> str:
    """Campaign URL configured for a score band."""
    if band == ScoreBand.PROMOTER:
        return campaign.promoter_url
    elif band == ScoreBand.PASSIVE:
        return campaign.passive_url
    else:
        return campaign.detractor_url


def _origin(url: str) -> tuple:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def _target(url: str, app_base_url: str) -> RedirectTarget:
    external = _origin(url) != _origin(app_base_url)
    return RedirectTarget(
        url=url, external=external, hash_route=not external and bool(urlsplit(url).fragment)
    )


def normalize_target(url: str, app_base_url: str) -> Optional[RedirectTarget]:
    """Normalize a configured destination.

    - URLs with a scheme and authority (``https://``, ``http://``,
      ``ftp://``...) are kept and are external unless they share the
      application's origin.
    - ``mailto:``, ``tel:`` and ``sms:`` links are kept and are external.
    - References starting with ``/``, ``#``, ``?`` or ``.`` resolve against
      the application. The resolved URL is internal only when it stays on
      the application's origin, so ``//other.host/x`` is external.
    - Anything else is a bare host/path: ``https://`` is prepended and the
      result is internal.

    Args:
        url: Destination as configured on the campaign
        app_base_url: URL of the running application

    Returns:
        Target, or None when no destination is configured
    """
    url = (url or "").strip()
    if not url:
        return None

    if _SCHEME.match(url):
        return _target(url, app_base_url)
    if _OPAQUE.match(url):
        return RedirectTarget(url=url, external=True)
    if url.startswith(_RELATIVE):
        return _target(urljoin(app_base_url, url), app_base_url)
    return RedirectTarget(url="https://" + url, external=False)


def _query_key(pair: str) -> str:
    return unquote_plus(pair.partition("=")[0])


def _merge_query(
    query: str, drop: Set[str], additions: List[Tuple[str, str]]
) -> str:
    """Rewrite a raw query string.

    Pairs whose key is in ``drop`` are removed. Every other pair is kept
    byte for byte, so repeated keys, bare flags and their escapes survive.
    An addition is appended unless its key is still present.
    """
    pairs = [pair for pair in query.split("&") if pair and _query_key(pair) not in drop]
    present = {_query_key(pair) for pair in pairs}
    pairs.extend(urlencode([(key, value)]) for key, value in additions if key not in present)
    return "&".join(pairs)


def forward_params(
    target: RedirectTarget,
    score: int,
    email: Optional[str],
    route_params: Mapping[str, str],
    token_key: str = DEFAULT_TOKEN_KEY,
) -> str:
    """Apply the forwarding policy to a destination's query string.

    Destinations on the application with a hash route (``https://app/#/thanks``)
    receive the parameters inside the fragment, where the route parser
    reads them. ``mailto:``-style links are returned unchanged.

    Args:
        target: Normalized destination
        score: Submitted score
        email: Respondent email, if given
        route_params: Query parameters present when the survey was loaded
        token_key: Portable token key, never forwarded

    Returns:
        Destination URL with the forwarded parameters
    """
    parts = urlsplit(target.url)
    if parts.scheme and not parts.netloc:
        return target.url

    drop = {token_key}
    additions: List[Tuple[str, str]] = []
    if not target.external:
        additions.extend((key, route_params[key]) for key in TRACKING_KEYS if key in route_params)
        additions.append(("score", str(score)))
        drop.add("score")
    if email:
        additions.append(("email", email))
        drop.add("email")

    if target.hash_route:
        route, _, route_query = parts.fragment.partition("?")
        route_query = _merge_query(route_query, drop, additions)
        return urlunsplit(parts._replace(
            query=_merge_query(parts.query, {token_key}, []),
            fragment=f"{route}?{route_query}" if route_query else route,
        ))

    return urlunsplit(parts._replace(query=_merge_query(parts.query, drop, additions)))


def compute_redirect(
    campaign: Campaign,
    score: int,
    email: Optional[str],
    route_params: Mapping[str, str],
    app_base_url: str,
    token_key: str = DEFAULT_TOKEN_KEY,
) -> Optional[str]:
    """Destination URL for a submitted score, or None to stay on the thank-you view."""
    band = classify_score(score)
    target = normalize_target(band_url(campaign, band), app_base_url)
    if target is None:
        logger.info(f"No {band.value} redirect configured for campaign {campaign.id}")
        return None

    url = forward_params(target, score, email, route_params, token_key)
    logger.info(
        f"Redirecting {band.value} of campaign {campaign.id} to "
        f"{'external' if target.external else 'internal'} {url}"
    )
    return url
