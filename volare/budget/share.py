from __future__ import annotations

from urllib.parse import urlencode

from volare.budget.models import BudgetResult

SHARE_TEXT_TEMPLATE = (
    "Living in {city} costs at least {total} per month ({currency}). "
    "Estimated with Volare."
)

TWITTER_INTENT_URL = "https://twitter.com/intent/tweet"
LINKEDIN_SHARE_URL = "https://www.linkedin.com/sharing/share-offsite/"


def format_total(result: BudgetResult) -> str:
    amount = round(result.total_monthly, 2)
    if amount == int(amount):
        return f"{result.currency_symbol}{int(amount):,}"
    return f"{result.currency_symbol}{amount:,.2f}"


def build_share_text(result: BudgetResult) -> str:
    return SHARE_TEXT_TEMPLATE.format(
        city=result.city,
        total=format_total(result),
        currency=result.currency,
    )


def build_share_links(result: BudgetResult, page_url: str) -> dict[str, str]:
    """Social share URLs for a result page."""
    return {
        "twitter": TWITTER_INTENT_URL
        + "?"
        + urlencode({"text": build_share_text(result), "url": page_url}),
        "linkedin": LINKEDIN_SHARE_URL + "?" + urlencode({"url": page_url}),
    }
