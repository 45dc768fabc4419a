"""Command-line interface for Catalog FX."""

import argparse
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import UUID

from catalog_fx import __version__
from catalog_fx.config import get_settings
from catalog_fx.container import Container
from catalog_fx.domain.products import Product
from catalog_fx.domain.value_objects import ProductStatus
from catalog_fx.exceptions import CatalogFxError
from catalog_fx.repositories.sqlite import SQLiteDatabase


def get_default_db_path() -> Path:
    """Get the default database path in user's home directory."""
    return Path.home() / ".catalog_fx" / "catalog.db"


def _db_path(args: argparse.Namespace) -> Path:
    return Path(args.database) if args.database else get_default_db_path()


def _open_container(args: argparse.Namespace) -> Container | None:
    """Build a container on an existing database, or None if it is missing."""
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        print("Run 'cfx init' to create a new database")
        return None
    return Container(settings=get_settings(), database=SQLiteDatabase(str(db_path)))


def _parse_uuid(value: str, label: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        print(f"Error: invalid {label}: {value}")
        return None


def _print_product(product: Product) -> None:
    print(f"Product: {product.name} ({product.id})")
    if product.parent_id:
        print(f"  Parent: {product.parent_id}")
    print(f"  Owner: {product.owner_id or '-'}")
    print(f"  Status: {product.status.value}")
    print(f"  Regular price: {product.regular_price or '-'}")
    print(f"  Sale price: {product.sale_price or '-'}")
    print(f"  Active price: {product.price or '-'}")
    meta = product.fx_audit.to_meta()
    if meta:
        print("  FX audit:")
        for key, value in meta.items():
            print(f"    {key}: {value}")


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = _db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = SQLiteDatabase(str(db_path))
    db.initialize()
    db.close()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        rates = list(container.rate_lookup.list_rates())
        vendors = list(container.vendor_currency_repository.list_all())
        products = list(container.product_repository.list_all())
        converted = sum(1 for p in products if p.fx_audit.is_converted)

        print(f"Database: {_db_path(args)}")
        print(f"Base currency: {container.settings.base_currency}")
        print(f"Exchange rates: {len(rates)}")
        print(f"Vendors with a currency: {len(vendors)}")
        print(f"Products: {len(products)} ({converted} converted)")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Catalog FX v{__version__}")
    return 0


def cmd_fx_update(args: argparse.Namespace) -> int:
    """Refresh exchange rates from the rate provider."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        try:
            stored = container.rate_updater.run()
        except CatalogFxError as e:
            print(f"Error: {e}")
            return 1
        base = container.settings.base_currency
        print(
            f"Stored {stored} exchange rates for base {base} "
            f"from {container.settings.rate_source_label}"
        )
    return 0


def cmd_fx_list(args: argparse.Namespace) -> int:
    """List stored exchange rates."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        rates = list(container.rate_lookup.list_rates())
        if not rates:
            print("No exchange rates stored")
            return 0

        print("Exchange rates:")
        print("-" * 60)
        for rate in rates:
            print(
                f"  {rate.pair}: {rate.rate} "
                f"(source: {rate.source or '-'}, updated {rate.observed_at:%Y-%m-%d %H:%M})"
            )
    return 0


def cmd_fx_set(args: argparse.Namespace) -> int:
    """Store a rate for one currency pair by hand."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        rate = Decimal(args.rate)
    except InvalidOperation:
        print(f"Error: invalid rate: {args.rate}")
        return 1

    with container:
        base = args.base or container.settings.base_currency
        try:
            stored = container.rate_lookup.store_rate(
                base, args.quote, rate, source=args.source
            )
        except CatalogFxError as e:
            print(f"Error: {e}")
            return 1
        print(f"Stored rate: {stored.pair} = {stored.rate}")
    return 0


def cmd_vendor_set_currency(args: argparse.Namespace) -> int:
    """Assign a vendor's currency."""
    vendor_id = _parse_uuid(args.vendor_id, "vendor ID")
    if vendor_id is None:
        return 1
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        stored = container.vendor_currency_service.set_currency(
            vendor_id, args.currency
        )
        if stored != args.currency.strip().upper():
            allowed = ", ".join(container.vendor_currency_service.allowed_currencies)
            print(f"Warning: {args.currency} is not supported (allowed: {allowed})")
        print(f"Vendor {vendor_id} currency: {stored}")
    return 0


def cmd_vendor_get_currency(args: argparse.Namespace) -> int:
    """Show a vendor's currency."""
    vendor_id = _parse_uuid(args.vendor_id, "vendor ID")
    if vendor_id is None:
        return 1
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        currency = container.vendor_currency_service.get_currency(vendor_id)
        print(f"Vendor {vendor_id} currency: {currency}")
    return 0


def cmd_product_add(args: argparse.Namespace) -> int:
    """Add a product, converting its prices from the vendor's currency."""
    vendor_id = None
    if args.vendor_id:
        vendor_id = _parse_uuid(args.vendor_id, "vendor ID")
        if vendor_id is None:
            return 1
    parent_id = None
    if args.parent_id:
        parent_id = _parse_uuid(args.parent_id, "parent ID")
        if parent_id is None:
            return 1

    container = _open_container(args)
    if container is None:
        return 1

    with container:
        products = container.product_repository
        if parent_id is not None and products.get(parent_id) is None:
            print(f"Error: parent product not found: {parent_id}")
            return 1

        product = Product(
            name=args.name,
            owner_id=vendor_id if parent_id is None else None,
            parent_id=parent_id,
            status=ProductStatus(args.status),
            import_source=args.import_source,
            regular_price=args.regular_price,
            sale_price=args.sale_price,
        )
        product.sync_active_price()

        if vendor_id is None and parent_id is not None:
            vendor_id = products.get_owner(parent_id)

        container.conversion_engine.convert_on_incoming_write(
            product, vendor_id, args.regular_price, args.sale_price
        )
        try:
            products.add(product)
        except CatalogFxError as e:
            print(f"Error: {e}")
            return 1

        print(f"Added product: {product.name} ({product.id})")
        _print_product(product)
    return 0


def cmd_product_show(args: argparse.Namespace) -> int:
    """Show a product and its FX audit trail."""
    product_id = _parse_uuid(args.id, "product ID")
    if product_id is None:
        return 1
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        product = container.product_repository.get(product_id)
        if product is None:
            print(f"Error: product not found: {product_id}")
            return 1
        _print_product(product)
    return 0


def cmd_product_reconcile(args: argparse.Namespace) -> int:
    """Convert a stored product whose prices are still in the vendor's currency."""
    product_id = _parse_uuid(args.id, "product ID")
    if product_id is None:
        return 1
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        product = container.product_repository.get(product_id)
        if product is None:
            print(f"Error: product not found: {product_id}")
            return 1
        try:
            converted = container.conversion_engine.reconcile_existing_entity(product)
        except CatalogFxError as e:
            print(f"Error: {e}")
            return 1

        if converted:
            print(f"Converted prices for {product.name}")
        else:
            print(f"No conversion needed for {product.name}")
        _print_product(product)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "catalog_fx.api.app:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload or settings.api_reload,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cfx",
        description="Catalog FX - Normalize vendor catalog prices into one base currency",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show database status")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # fx command group
    fx_parser = subparsers.add_parser("fx", help="Exchange rate management")
    fx_subparsers = fx_parser.add_subparsers(dest="fx_command", help="FX commands")

    fx_update_parser = fx_subparsers.add_parser(
        "update", help="Fetch the latest rates from the rate provider"
    )
    fx_update_parser.set_defaults(func=cmd_fx_update)

    fx_list_parser = fx_subparsers.add_parser("list", help="List stored rates")
    fx_list_parser.set_defaults(func=cmd_fx_list)

    fx_set_parser = fx_subparsers.add_parser("set", help="Store a rate by hand")
    fx_set_parser.add_argument(
        "--quote", required=True, help="Vendor currency code (e.g., EUR)"
    )
    fx_set_parser.add_argument(
        "--rate", required=True, help="Units of the quote currency per 1 base unit"
    )
    fx_set_parser.add_argument(
        "--base", default=None, help="Base currency code (default: configured base)"
    )
    fx_set_parser.add_argument("--source", default="manual", help="Rate source label")
    fx_set_parser.set_defaults(func=cmd_fx_set)

    # vendor command group
    vendor_parser = subparsers.add_parser("vendor", help="Vendor currency settings")
    vendor_subparsers = vendor_parser.add_subparsers(
        dest="vendor_command", help="Vendor commands"
    )

    vendor_set_parser = vendor_subparsers.add_parser(
        "set-currency", help="Assign a vendor's currency"
    )
    vendor_set_parser.add_argument("--vendor-id", required=True, help="Vendor ID")
    vendor_set_parser.add_argument("--currency", required=True, help="Currency code")
    vendor_set_parser.set_defaults(func=cmd_vendor_set_currency)

    vendor_get_parser = vendor_subparsers.add_parser(
        "get-currency", help="Show a vendor's currency"
    )
    vendor_get_parser.add_argument("--vendor-id", required=True, help="Vendor ID")
    vendor_get_parser.set_defaults(func=cmd_vendor_get_currency)

    # product command group
    product_parser = subparsers.add_parser("product", help="Catalog products")
    product_subparsers = product_parser.add_subparsers(
        dest="product_command", help="Product commands"
    )

    product_add_parser = product_subparsers.add_parser(
        "add", help="Add a product with vendor-currency prices"
    )
    product_add_parser.add_argument("--name", required=True, help="Product name")
    product_add_parser.add_argument("--vendor-id", help="Owning vendor ID")
    product_add_parser.add_argument("--parent-id", help="Parent product ID")
    product_add_parser.add_argument("--regular-price", help="Regular price")
    product_add_parser.add_argument("--sale-price", help="Sale price")
    product_add_parser.add_argument("--import-source", help="Import source marker")
    product_add_parser.add_argument(
        "--status",
        default=ProductStatus.PUBLISH.value,
        choices=[s.value for s in ProductStatus],
        help="Product status (default: publish)",
    )
    product_add_parser.set_defaults(func=cmd_product_add)

    product_show_parser = product_subparsers.add_parser(
        "show", help="Show a product and its FX audit trail"
    )
    product_show_parser.add_argument("--id", required=True, help="Product ID")
    product_show_parser.set_defaults(func=cmd_product_show)

    product_reconcile_parser = product_subparsers.add_parser(
        "reconcile", help="Convert a stored product if its prices are pending"
    )
    product_reconcile_parser.add_argument("--id", required=True, help="Product ID")
    product_reconcile_parser.set_defaults(func=cmd_product_reconcile)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload"
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "fx" and (
        not hasattr(args, "fx_command") or args.fx_command is None
    ):
        fx_parser.print_help()
        return 0

    if args.command == "vendor" and (
        not hasattr(args, "vendor_command") or args.vendor_command is None
    ):
        vendor_parser.print_help()
        return 0

    if args.command == "product" and (
        not hasattr(args, "product_command") or args.product_command is None
    ):
        product_parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
