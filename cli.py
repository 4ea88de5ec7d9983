#!/usr/bin/env python3
"""Volare management CLI."""

import asyncio
import os
import subprocess
import sys

import click

from volare.budget.errors import ERROR_GUIDANCE, ServiceError
from volare.budget.models import BudgetResult, HousingMode, PopulationBucket
from volare.reference import BUDGET_CATEGORIES, CURRENCIES, LANGUAGES


def _run(args: list[str], *, replace: bool = False) -> None:
    click.echo(
        f"  {click.style('>', dim=True)} {click.style(' '.join(args), dim=True)}\n"
    )
    if replace:
        os.execvp(args[0], args)
    result = subprocess.run(args)
    if result.returncode != 0:
        click.echo(
            f"  {click.style('✗', fg='red')} exited with code {result.returncode}"
        )
        sys.exit(result.returncode)


def _ok(text: str) -> None:
    click.echo(f"  {click.style('✓', fg='green')} {text}")


def _header(text: str) -> None:
    click.echo(f"\n  {click.style(text, fg='cyan', bold=True)}\n")


def _fail(error: ServiceError) -> None:
    guidance = ERROR_GUIDANCE[error.kind]
    click.echo(
        f"  {click.style('✗', fg='red')} {guidance.title} "
        f"{click.style(f'[{error.kind.value}]', dim=True)}"
    )
    click.echo(f"    {guidance.fix}")
    click.echo(f"    {click.style(error.message, dim=True)}")
    sys.exit(1)


def _render_budget(result: BudgetResult) -> None:
    symbol = result.currency_symbol
    _header(f"{result.city}: {symbol}{result.total_monthly:,.0f} / month")
    if result.summary:
        click.echo(f"  {result.summary}\n")

    for item in result.items:
        click.echo(
            f"  {click.style(f'{symbol}{item.amount:>10,.2f}', bold=True)}  "
            f"{item.category}: {item.description}"
        )

    if result.saving_tips:
        click.echo(f"\n  {click.style('Saving tips', fg='cyan')}")
        for tip in result.saving_tips:
            click.echo(f"  {tip.icon} {tip.tip}")

    if result.sources:
        click.echo(f"\n  {click.style('Sources', fg='cyan')}")
        for source in result.sources:
            click.echo(f"  - {source.title} {click.style(source.uri, dim=True)}")

    coordinates = result.coordinates
    click.echo(
        f"\n  {click.style(f'lat {coordinates.lat}, lng {coordinates.lng}', dim=True)}"
    )


@click.group()
def cli() -> None:
    """Volare management CLI."""


@cli.command()
@click.argument("uvicorn_args", nargs=-1)
def app(uvicorn_args: tuple[str, ...]) -> None:
    """Start uvicorn with --reload."""
    _header("Starting Volare")
    _run(
        ["uv", "run", "uvicorn", "volare.app:app", "--reload", *uvicorn_args],
        replace=True,
    )


@cli.group()
def db() -> None:
    """Database management commands."""


@db.command()
def migrate() -> None:
    """Run alembic upgrade head."""
    _header("Running migrations")
    _run(["uv", "run", "alembic", "upgrade", "head"])
    _ok("Migrations applied")


@db.command()
@click.argument("message", default="auto")
def revision(message: str) -> None:
    """Generate alembic migration."""
    _header(f"Generating migration: {message}")
    _run(["uv", "run", "alembic", "revision", "--autogenerate", "-m", message])
    _ok("Migration generated")


@cli.command()
@click.argument("city")
@click.option(
    "-c",
    "--category",
    "categories",
    multiple=True,
    type=click.Choice([c.id for c in BUDGET_CATEGORIES]),
    help="Category to include (repeatable). Defaults to all.",
)
@click.option(
    "--currency",
    default="USD",
    type=click.Choice([c.code for c in CURRENCIES], case_sensitive=False),
)
@click.option(
    "--language", default="es", type=click.Choice([lang.code for lang in LANGUAGES])
)
@click.option(
    "--housing",
    default=HousingMode.SHARED.value,
    type=click.Choice([m.value for m in HousingMode]),
)
@click.option("--share-url", default=None, help="Print share links for this URL.")
def budget(
    city: str,
    categories: tuple[str, ...],
    currency: str,
    language: str,
    housing: str,
    share_url: str | None,
) -> None:
    """Estimate the minimum monthly cost of living in CITY."""
    from volare.ai import create_budget_engine, create_suggestion_engine
    from volare.ai.interface import BudgetRequest
    from volare.base.db import async_session
    from volare.budget.service import fetch_budget
    from volare.budget.share import build_share_links, build_share_text
    from volare.session import SearchSession

    engine = create_budget_engine()

    async def _fetcher(request: BudgetRequest) -> BudgetResult:
        async with async_session() as session:
            return await fetch_budget(
                session,
                engine,
                city=request.city,
                category_ids=request.category_ids,
                currency_code=request.currency_code,
                language_code=request.language_code,
                housing_mode=request.housing_mode,
            )

    view = SearchSession(
        _fetcher,
        create_suggestion_engine(),
        language_code=language,
        currency_code=currency.upper(),
        category_ids=categories or None,
        housing_mode=HousingMode(housing),
    )

    _header(f"Estimating budget for {city}")
    result = asyncio.run(view.search(city))
    if view.error is not None:
        _fail(view.error)
    if result is None:
        return

    _render_budget(result)
    if share_url:
        click.echo(f"\n  {build_share_text(result)}")
        for network, link in build_share_links(result, share_url).items():
            click.echo(f"  {network}: {link}")


@cli.command()
@click.argument("text", default="")
@click.option("--country", default=None)
@click.option("--region", default=None)
@click.option(
    "--population",
    default="",
    type=click.Choice([b.value for b in PopulationBucket]),
)
@click.option(
    "--language", default="es", type=click.Choice([lang.code for lang in LANGUAGES])
)
def suggest(
    text: str,
    country: str | None,
    region: str | None,
    population: str,
    language: str,
) -> None:
    """Suggest city names matching TEXT."""
    from volare.ai import create_suggestion_engine
    from volare.ai.interface import SuggestionRequest
    from volare.budget.models import SearchFilters

    request = SuggestionRequest(
        text=text,
        language_code=language,
        filters=SearchFilters(
            country=country, region=region, population=PopulationBucket(population)
        ),
    )
    suggestions = asyncio.run(create_suggestion_engine().suggest(request))

    if not suggestions:
        click.echo(f"  {click.style('-', dim=True)} no suggestions")
        return
    for name in suggestions:
        _ok(name)


@cli.command()
@click.argument("pytest_args", nargs=-1)
def test(pytest_args: tuple[str, ...]) -> None:
    """Run pytest."""
    _header("Running tests")
    _run(["uv", "run", "pytest", "tests/", "-v", *pytest_args], replace=True)


@cli.command()
def lint() -> None:
    """Run mypy."""
    _header("Running mypy")
    _run(["uv", "run", "mypy", "."])
    _ok("Type check passed")


if __name__ == "__main__":
    cli()
