import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from nps_router.client.nps_router import NPSRouter
from nps_router.domains.errors import (
    CampaignNotFoundError,
    ScoreValidationError,
    SurveyUnavailableError,
)
from nps_router.services.submission import SurveySession

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer()
console = Console()

ConfigOption = Annotated[
    str, typer.Option(help="Path to the configuration JSON file.")
]


def load_router(config: str, verbose: bool = False) -> NPSRouter:
    """Build the router, exiting with a readable error on bad configuration."""
    if verbose:
        logging.getLogger().setLevel(logging.INFO)
    try:
        return NPSRouter(config_path=config)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)


@app.command()
def campaigns(config: ConfigOption = "config.json"):
    """List stored campaigns with their NPS."""
    router = load_router(config)
    summaries = router.nps_service.summaries_by_campaign()

    table = Table(title="Campaigns")
    for column in ("ID", "Name", "Audience", "Active", "Responses", "NPS"):
        table.add_column(column)
    for campaign in router.list_campaigns():
        summary = summaries[campaign.id]
        table.add_row(
            campaign.id,
            campaign.name,
            campaign.audience,
            "yes" if campaign.is_active else "no",
            str(summary.total),
            str(summary.nps),
        )
    console.print(table)


@app.command("new-campaign")
def new_campaign(
    name: Annotated[str, typer.Option(help="Display label.")] = "New campaign",
    audience: Annotated[str, typer.Option(help="customers, employees or partners.")] = "customers",
    brand: Annotated[Optional[str], typer.Option(help="Brand name.")] = None,
    config: ConfigOption = "config.json",
):
    """Create a campaign from the default values."""
    router = load_router(config)
    fields = {"name": name, "audience": audience}
    if brand is not None:
        fields["brand_name"] = brand
    try:
        campaign = router.create_campaign(**fields)
    except ValueError as e:
        console.print(f"[bold red]Invalid campaign:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]Created campaign[/green] {campaign.id}")
    console.print(router.survey_link(campaign.id), soft_wrap=True)


@app.command()
def link(
    campaign_id: str,
    portable: Annotated[bool, typer.Option(help="Embed the campaign in the link.")] = False,
    config: ConfigOption = "config.json",
):
    """Print the survey link of a campaign."""
    router = load_router(config)
    if router.get_campaign(campaign_id) is None:
        console.print(f"[bold red]Unknown campaign:[/bold red] {campaign_id}")
        raise typer.Exit(code=1)
    if portable:
        console.print(router.portable_link(campaign_id), soft_wrap=True)
    else:
        console.print(router.survey_link(campaign_id), soft_wrap=True)


@app.command()
def stats(
    campaign_id: Annotated[Optional[str], typer.Option(help="Only this campaign.")] = None,
    config: ConfigOption = "config.json",
):
    """Show NPS figures and the score distribution."""
    router = load_router(config)
    summary = router.dashboard(campaign_id)

    console.print(f"[bold]NPS:[/bold] {summary.nps}  ({summary.total} responses)")
    console.print(
        f"Promoters {summary.promoters} ({summary.promoter_percent:.0f}%)  "
        f"Passives {summary.passives} ({summary.passive_percent:.0f}%)  "
        f"Detractors {summary.detractors} ({summary.detractor_percent:.0f}%)"
    )
    table = Table(title="Distribution")
    table.add_column("Score")
    table.add_column("Count")
    for score, count in router.distribution(campaign_id).items():
        table.add_row(str(score), str(count))
    console.print(table)


@app.command()
def export(
    output: Annotated[str, typer.Option(help="CSV file to write.")] = "nps_responses.csv",
    campaign_id: Annotated[Optional[str], typer.Option(help="Only this campaign.")] = None,
    config: ConfigOption = "config.json",
):
    """Export responses as CSV."""
    router = load_router(config)
    csv_text = router.export_csv(campaign_id)
    if not csv_text:
        console.print("[yellow]No responses to export.[/yellow]")
        return
    with open(output, "w", encoding="utf-8") as f:
        f.write(csv_text)
    console.print(f"[green]Wrote[/green] {output}")


async def run_survey(
    router: NPSRouter,
    locator: str,
    score: int,
    comment: Optional[str],
    email: Optional[str],
    metadata: dict,
) -> SurveySession:
    session = router.open_survey(locator, metadata)
    session.select_score(score)
    await session.submit(comment=comment, email=email)
    session.redirect()
    await router.shutdown()
    return session


@app.command()
def survey(
    locator: Annotated[str, typer.Argument(help="Survey locator, e.g. '#/survey/<id>?utm_source=mail'.")],
    score: Annotated[int, typer.Option(help="Score from 0 to 10.")],
    comment: Annotated[Optional[str], typer.Option(help="Optional comment.")] = None,
    email: Annotated[Optional[str], typer.Option(help="Optional email.")] = None,
    metadata: Annotated[str, typer.Option(help="Client context as a JSON object.")] = "{}",
    config: ConfigOption = "config.json",
    verbose: Annotated[bool, typer.Option(help="Log redirect decisions.")] = False,
):
    """Answer a survey and print where the respondent is sent."""
    router = load_router(config, verbose)
    try:
        context = json.loads(metadata)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Invalid metadata:[/bold red] {e}")
        raise typer.Exit(code=1)
    if not isinstance(context, dict):
        console.print("[bold red]Invalid metadata:[/bold red] expected a JSON object")
        raise typer.Exit(code=1)

    try:
        session = asyncio.run(run_survey(router, locator, score, comment, email, context))
    except SurveyUnavailableError as e:
        console.print(f"[yellow]{e}[/yellow] Back to the dashboard: {e.dashboard}")
        raise typer.Exit(code=1)
    except (ScoreValidationError, CampaignNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]{session.campaign.thank_you_message}[/green]")
    if session.redirect_url:
        console.print(f"[bright_blue]Redirect:[/bright_blue] {session.redirect_url}", soft_wrap=True)
    else:
        console.print("No redirect for this score.")


if __name__ == "__main__":
    app()
