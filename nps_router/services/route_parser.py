"""
Hash-fragment route parsing.

A locator looks like ``#/survey/<campaignId>?email=a@b.c&utm_source=x``.
"""
import re
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlencode

from pydantic import BaseModel, Field

SURVEY_PREFIX = "survey/"
DASHBOARD = "#/"

_LEADING = re.compile(r"^#?/?")


class Route(BaseModel):
    """Logical path and query parameters of a locator."""

    path: str = Field("", description="Fragment path without leading '#/'")
    params: Dict[str, str] = Field(default_factory=dict)


def parse_route(locator: Optional[str]) -> Route:
    """Split a hash locator into a path and query parameters.

    Never raises: malformed percent-encoding is replaced and keys without
    ``=`` map to an empty string. The last occurrence of a key wins.

    Args:
        locator: Hash fragment, with or without the leading ``#``

    Returns:
        Parsed route
    """
    if not locator:
        return Route()

    fragment = _LEADING.sub("", locator, count=1)
    path, _, query = fragment.partition("?")
    params = dict(parse_qsl(query, keep_blank_values=True, errors="replace"))
    return Route(path=path, params=params)


def format_route(path: str) -> str:
    """Normalize a path into a ``#/`` locator."""
    if path.startswith("#"):
        return path
    return "#/" + path.lstrip("/")


def survey_campaign_id(path: str) -> Optional[str]:
    """Campaign id of a ``survey/<id>`` path, or None for any other view."""
    if not path.startswith(SURVEY_PREFIX):
        return None
    campaign_id = path[len(SURVEY_PREFIX):].split("/", 1)[0]
    return campaign_id or None


def is_survey_path(path: str) -> bool:
    """True when the path addresses the survey view."""
    return path == SURVEY_PREFIX.rstrip("/") or path.startswith(SURVEY_PREFIX)


def survey_link(
    base_url: str, campaign_id: str, params: Optional[Mapping[str, str]] = None
) -> str:
    """Build a shareable survey link.

    Args:
        base_url: Application URL the fragment is appended to
        campaign_id: Campaign to open
        params: Extra query parameters

    Returns:
        ``<base_url>#/survey/<id>`` plus the encoded parameters
    """
    link = f"{base_url}#/{SURVEY_PREFIX}{quote(campaign_id, safe='')}"
    if params:
        link += "?" + urlencode(params)
    return link
