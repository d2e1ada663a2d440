# catalog_service/seed.py

"""
`catalog-seed`: load sample categories and products through the HTTP API.
"""
import logging

import click

from .client import CatalogClient
from .errors import CatalogError

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES = ["Headphones", "Speakers", "Microphones"]

SAMPLE_PRODUCTS = [
    {"name": "Delta Sound Pro X1", "category": "Headphones", "price": 199.99, "image": "/window.svg"},
    {"name": "Mobi Mini Speaker", "category": "Speakers", "price": 49.99, "image": "/file.svg"},
    {"name": "Delta Studio Mic", "category": "Microphones", "price": 129.99, "image": "/globe.svg"},
    {"name": "Wireless Earbuds Pro", "category": "Headphones", "price": 89.99, "image": "/next.svg"},
    {"name": "Studio Monitor Speakers", "category": "Speakers", "price": 299.99, "image": "/vercel.svg"},
    {"name": "Professional Condenser Mic", "category": "Microphones", "price": 199.99, "image": "/window.svg"},
]


def seed_categories(client):
    """Create the sample categories. Returns (created, skipped) counts."""
    created = skipped = 0
    for name in SAMPLE_CATEGORIES:
        try:
            category = client.create_category(name)
        except CatalogError as e:
            if e.status_code != 409:
                raise
            click.echo(f"Skipped category {name}: {e.message}")
            skipped += 1
            continue
        click.echo(f"Created category {category['name']} ({category['_id']})")
        created += 1
    return created, skipped


def seed_products(client):
    """Create the sample products. Returns (created, skipped) counts."""
    created = skipped = 0
    for product in SAMPLE_PRODUCTS:
        try:
            result = client.create_product(**product)
        except CatalogError as e:
            if e.status_code != 409:
                raise
            click.echo(f"Skipped product {product['name']}: {e.message}")
            skipped += 1
            continue
        click.echo(f"Created product {result['name']} ({result['_id']})")
        created += 1
    return created, skipped


@click.group()
@click.option("--base-url", default=None, help="Catalog API URL (defaults to CATALOG_API_URL).")
@click.pass_context
def cli(ctx, base_url):
    """Seed the catalog with sample data."""
    ctx.obj = CatalogClient(base_url=base_url)
    ctx.call_on_close(ctx.obj.close)


def _run(seeders, client):
    try:
        for seeder in seeders:
            created, skipped = seeder(client)
            click.echo(f"{seeder.__name__}: {created} created, {skipped} skipped")
    except CatalogError as e:
        logger.error(f"Seeding failed: [{e.code.value}] {e.message}")
        raise click.ClickException(f"[{e.code.value}] {e.message}")


@cli.command()
@click.pass_obj
def categories(client):
    """Create Headphones, Speakers and Microphones."""
    _run([seed_categories], client)


@cli.command()
@click.pass_obj
def products(client):
    """Create six sample products."""
    _run([seed_products], client)


@cli.command(name="all")
@click.pass_obj
def seed_all(client):
    """Create the sample categories, then the sample products."""
    _run([seed_categories, seed_products], client)


if __name__ == "__main__":
    cli()
