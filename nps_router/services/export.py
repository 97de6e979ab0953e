"""
CSV export of responses.
"""
import csv
import io
import json
from typing import Iterable, List, Mapping

from nps_router.domains.campaigns import Campaign
from nps_router.domains.responses import Response

CSV_COLUMNS = (
    "id",
    "timestamp",
    "campaignId",
    "score",
    "comment",
    "email",
    "brand",
    "audience",
    "metadata",
    "routeParams",
)


def export_rows(
    responses: Iterable[Response], campaigns: Mapping[str, Campaign]
) -> List[dict]:
    """Flatten responses into export rows, joining campaign brand and audience."""
    rows = []
    for response in responses:
        campaign = campaigns.get(response.campaign_id)
        rows.append({
            "id": response.id,
            "timestamp": response.timestamp,
            "campaignId": response.campaign_id,
            "score": response.score,
            "comment": response.comment,
            "email": response.email,
            "brand": campaign.brand_name if campaign else "",
            "audience": campaign.audience if campaign else "",
            "metadata": json.dumps(response.metadata, ensure_ascii=False),
            "routeParams": json.dumps(response.route_params, ensure_ascii=False),
        })
    return rows


def responses_to_csv(
    responses: Iterable[Response], campaigns: Mapping[str, Campaign]
) -> str:
    """Render responses as CSV.

    The header row holds the bare column names, every value is quoted with
    inner quotes doubled, and rows are separated by ``\\n``. No responses
    yields an empty string.

    Args:
        responses: Responses to export
        campaigns: Campaigns by id, for the brand and audience columns

    Returns:
        CSV text
    """
    rows = export_rows(responses, campaigns)
    if not rows:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if row[c] is None else row[c] for c in CSV_COLUMNS])
    return ",".join(CSV_COLUMNS) + "\n" + buffer.getvalue().rstrip("\n")
