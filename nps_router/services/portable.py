"""
Portable campaign tokens.

A portable token carries a campaign's public configuration inside a
link, so the survey works in a browser that never stored the campaign.
The token is the URL-safe base64 (unpadded) of the UTF-8 JSON of the
portable fields.
"""
import base64
import binascii
import json
import logging
from typing import Optional

from pydantic import ValidationError

from nps_router.domains.campaigns import PORTABLE_FIELDS, Campaign, PortableCampaign
from nps_router.services.route_parser import survey_link

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_KEY = "c"
MAX_TOKEN_LENGTH = 16384


def encode_portable(campaign: Campaign) -> str:
    """Serialize a campaign's portable fields into a URL-safe token.

    Args:
        campaign: Campaign to encode; id, name and audience are left out

    Returns:
        Opaque token, identical for identical campaigns
    """
    subset = PortableCampaign(
        **{name: getattr(campaign, name) for name in PORTABLE_FIELDS}
    )
    document = json.dumps(
        subset.model_dump(by_alias=True),
        ensure_ascii=False,
        separators=(",", ":"),
    )
    token = base64.urlsafe_b64encode(document.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode_portable(token: Optional[str]) -> Optional[PortableCampaign]:
    """Decode a portable token.

    Args:
        token: Token produced by ``encode_portable``

    Returns:
        Decoded fields, or None when the token is malformed or longer
        than MAX_TOKEN_LENGTH
    """
    if not token:
        return None
    if len(token) > MAX_TOKEN_LENGTH:
        logger.info(f"Ignoring portable token of {len(token)} characters")
        return None
    try:
        raw = token.strip().encode("ascii")
        raw += b"=" * (-len(raw) % 4)
        document = base64.urlsafe_b64decode(raw).decode("utf-8")
        data = json.loads(document)
        if not isinstance(data, dict):
            raise ValueError("portable token does not hold an object")
        return PortableCampaign.model_validate(data)
    except (binascii.Error, UnicodeError, ValueError, RecursionError, ValidationError) as e:
        logger.info(f"Ignoring malformed portable token: {e}")
        return None


def portable_link(
    base_url: str, campaign: Campaign, token_key: str = DEFAULT_TOKEN_KEY
) -> str:
    """Survey link embedding the campaign's portable token."""
    return survey_link(base_url, campaign.id, {token_key: encode_portable(campaign)})
