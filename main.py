"""CLI entry point for the Archery Pro catalog tools."""

from __future__ import annotations

import logging

import click

from config import settings


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Archery Pro variant, SKU and pricing tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
def web() -> None:
    """Start the Flask API server."""
    from api.app import create_app

    app = create_app()
    app.run(
        host=settings.flask_host,
        port=settings.flask_port,
        debug=settings.flask_debug,
    )


@cli.command()
@click.argument(
    "kind",
    type=click.Choice(["random", "value", "brand", "product-type", "location"]),
)
@click.option("--existing", "-e", multiple=True, help="Code already in use (repeatable).")
@click.option("--length", default=4, show_default=True, help="Length of random codes.")
@click.option("--name", default="", help="Value name for value codes.")
@click.option("--location-type", default="others", help="Location type for location codes.")
def gen_code(
    kind: str,
    existing: tuple[str, ...],
    length: int,
    name: str,
    location_type: str,
) -> None:
    """Generate a code that is not among the existing ones."""
    from services.code_generator import (
        GenerationExhausted,
        generate_brand_code,
        generate_from_name,
        generate_location_code,
        generate_product_type_code,
        generate_random_code,
    )

    try:
        if kind == "random":
            code = generate_random_code(length, existing)
        elif kind == "value":
            if not name.strip():
                raise click.UsageError("--name is required for value codes")
            code = generate_from_name(name, existing)
        elif kind == "brand":
            code = generate_brand_code(existing)
        elif kind == "product-type":
            code = generate_product_type_code(existing)
        else:
            code = generate_location_code(location_type)
    except GenerationExhausted as exc:
        raise click.ClickException(str(exc)) from exc

    print(code)


@cli.command()
@click.argument("code")
@click.option("--existing", "-e", multiple=True, help="Code already in use (repeatable).")
@click.option("--variant", is_flag=True, help="Check as a 4-digit variant code.")
def check_code(code: str, existing: tuple[str, ...], variant: bool) -> None:
    """Check a code's format and uniqueness."""
    from utils.codes import check_code as _check_code
    from utils.codes import is_valid_unique_code, is_valid_variant_code

    validator = is_valid_variant_code if variant else is_valid_unique_code
    result = _check_code(code, existing, validator)
    if result.ok:
        print(f"{result.code}: OK")
        return
    print(f"{result.code}: {result.message}")
    raise SystemExit(1)


def _parse_selection(raw: str) -> tuple[str, list[str]]:
    axis, sep, values = raw.partition("=")
    if not sep or not axis.strip():
        raise click.BadParameter(f"expected AXIS=VALUE[,VALUE...], got {raw!r}")
    return axis.strip(), [v.strip() for v in values.split(",") if v.strip()]


@cli.command()
@click.argument("catalog_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--base-sku", default="", help="Base SKU of the product.")
@click.option("--brand-code", default="", help="Brand code, used when --base-sku is omitted.")
@click.option("--type-code", default="", help="Product type code, used when --base-sku is omitted.")
@click.option("--select", "-s", "selections", multiple=True, help="AXIS=VALUE[,VALUE...]")
@click.option("--brand", default="", help="Brand name for variant names.")
@click.option("--product-type", default="", help="Product type name for variant names.")
@click.option("--name", "product_name", default="", help="Product name for variant names.")
def variants(
    catalog_path: str,
    base_sku: str,
    brand_code: str,
    type_code: str,
    selections: tuple[str, ...],
    brand: str,
    product_type: str,
    product_name: str,
) -> None:
    """Preview every variant of a product."""
    from services.catalog import load_catalog
    from services.code_generator import GenerationExhausted
    from services.sku_assembler import build_variants
    from services.variant_combinations import SelectedVariant
    from utils.sku import generate_sku

    catalog = load_catalog(catalog_path)

    selected = []
    for raw in selections:
        axis_ref, values = _parse_selection(raw)
        axis = catalog.find_axis(axis_ref)
        if axis is None:
            raise click.BadParameter(f"unknown variant type {axis_ref!r}", param_hint="--select")
        selected.append(SelectedVariant(axis_id=axis.id, values=values))

    base_sku = base_sku or generate_sku(brand_code, type_code)
    if not base_sku:
        raise click.UsageError("--base-sku, or --brand-code and --type-code, are required")

    try:
        drafts = build_variants(
            base_sku,
            selected,
            catalog.variant_types,
            brand=brand,
            product_type=product_type,
            product_name=product_name,
        )
    except GenerationExhausted as exc:
        raise click.ClickException(str(exc)) from exc

    print(f"{'#':<6} {'SKU':<24} Name")
    print("-" * 80)
    for draft in drafts:
        print(f"{draft.variant_code:<6} {draft.sku:<24} {draft.name}")
    print(f"\nTotal: {len(drafts)} variant(s)")


@cli.command()
@click.option("--usd", "usd_price", type=float, required=True, help="Price in USD.")
@click.option("--rate", "exchange_rate", type=float, required=True, help="USD exchange rate.")
@click.option("--adjust", "adjustment", type=float, default=0.0, help="Adjustment percentage.")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Catalog JSON with price categories and taxes.",
)
def prices(usd_price: float, exchange_rate: float, adjustment: float, catalog_path: str) -> None:
    """Derive customer prices for every price category."""
    from services.catalog import load_catalog
    from services.pricing import price_product

    catalog = load_catalog(catalog_path)
    breakdown = price_product(
        usd_price,
        exchange_rate,
        adjustment,
        catalog.sorted_categories(),
        catalog.taxes,
    )

    print(f"HB Real:  {breakdown.hb_real:,}")
    print(f"HB Naik:  {breakdown.hb_naik:,}")
    print(f"Tax:      {breakdown.total_tax_percentage:g}%")
    if not breakdown.customer_prices:
        print("\nNo customer prices (HB Naik is zero).")
        return

    print(f"\n{'Category':<16} {'Base':>14} {'Tax':>12} {'Total':>14}")
    print("-" * 60)
    for key, price in breakdown.customer_prices.items():
        print(
            f"{key:<16} "
            f"{price.base_price:>14,} "
            f"{price.tax_amount:>12,} "
            f"{price.tax_inclusive_price:>14,}"
        )


@cli.command()
@click.argument("skus", nargs=-1)
@click.option("--name", default="", help="Product name printed above every barcode.")
@click.option("--size", "label_size", default=None, help="label-small, label-medium or label-large.")
@click.option("--output", default=None, help="Output PDF path.")
def labels(skus: tuple[str, ...], name: str, label_size: str | None, output: str | None) -> None:
    """Generate a barcode label PDF for the given SKUs."""
    if not skus:
        print("Usage: labels SKU [SKU ...]")
        return
    from pathlib import Path

    from services.barcode_generator import create_label_sheet

    output = output or str(Path(settings.label_output_dir) / "labels.pdf")
    try:
        create_label_sheet([{"sku": sku, "name": name} for sku in skus], output, label_size)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--size") from exc
    print(f"Label sheet saved to {output}")


if __name__ == "__main__":
    cli()
