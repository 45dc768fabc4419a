"""API routes for Catalog FX."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from catalog_fx.api.schemas import (
    ExchangeRateCreate,
    ExchangeRateResponse,
    HealthResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RateRefreshResponse,
    ReconcileResponse,
    VendorCurrencyResponse,
    VendorCurrencyUpdate,
)
from catalog_fx.container import Container, get_container
from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.products import Product
from catalog_fx.domain.value_objects import ProductStatus
from catalog_fx.exceptions import ProductNotFoundError
from catalog_fx.logging_config import get_logger

logger = get_logger(__name__)

# Create routers
health_router = APIRouter(tags=["health"])
rate_router = APIRouter(prefix="/fx/rates", tags=["exchange-rates"])
vendor_router = APIRouter(prefix="/vendors", tags=["vendors"])
product_router = APIRouter(prefix="/products", tags=["products"])
integration_router = APIRouter(prefix="/integrations", tags=["integrations"])


def get_app_container() -> Container:
    """Get the container backing the API.

    Overridden in tests using app.dependency_overrides.
    """
    return get_container()


ContainerDep = Annotated[Container, Depends(get_app_container)]


# Helper functions
def _rate_to_response(rate: ExchangeRate) -> ExchangeRateResponse:
    return ExchangeRateResponse(
        base_currency=rate.base_currency,
        quote_currency=rate.quote_currency,
        rate=str(rate.rate),
        observed_at=rate.observed_at,
        source=rate.source,
    )


def _product_to_response(product: Product) -> ProductResponse:
    """Convert Product domain object to response schema."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        owner_id=product.owner_id,
        parent_id=product.parent_id,
        status=product.status.value,
        import_source=product.import_source,
        stock_quantity=product.stock_quantity,
        regular_price=product.regular_price,
        sale_price=product.sale_price,
        price=product.price,
        fx_audit=product.fx_audit.to_meta(),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _resolve_vendor_id(
    container: Container,
    payload: ProductCreate | ProductUpdate,
    product: Product,
) -> UUID | None:
    """Vendor named in the request, else the product's owner, else its parent's."""
    for candidate in payload.vendor_candidates():
        if candidate is not None:
            return candidate
    if product.owner_id is not None:
        return product.owner_id
    if product.parent_id is not None:
        return container.product_repository.get_owner(product.parent_id)
    return None


# Health endpoints
@health_router.get("/health", response_model=HealthResponse)
def health_check(container: ContainerDep) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy", base_currency=container.settings.base_currency
    )


# Exchange rate endpoints
@rate_router.get("", response_model=list[ExchangeRateResponse])
def list_rates(container: ContainerDep) -> list[ExchangeRateResponse]:
    """List all stored exchange rates."""
    return [_rate_to_response(r) for r in container.rate_lookup.list_rates()]


@rate_router.post(
    "", response_model=ExchangeRateResponse, status_code=status.HTTP_201_CREATED
)
def store_rate(
    payload: ExchangeRateCreate, container: ContainerDep
) -> ExchangeRateResponse:
    """Insert or replace the rate for one currency pair."""
    stored = container.rate_lookup.store_rate(
        payload.base_currency or container.settings.base_currency,
        payload.quote_currency,
        payload.rate,
        source=payload.source,
    )
    return _rate_to_response(stored)


@rate_router.post("/refresh", response_model=RateRefreshResponse)
def refresh_rates(container: ContainerDep) -> RateRefreshResponse:
    """Fetch the latest rates from the provider and store them."""
    return RateRefreshResponse(stored=container.rate_updater.run())


# Vendor endpoints
@vendor_router.get("/{vendor_id}/currency", response_model=VendorCurrencyResponse)
def get_vendor_currency(
    vendor_id: UUID, container: ContainerDep
) -> VendorCurrencyResponse:
    currency = container.vendor_currency_service.get_currency(vendor_id)
    return VendorCurrencyResponse(vendor_id=vendor_id, currency=currency)


@vendor_router.put("/{vendor_id}/currency", response_model=VendorCurrencyResponse)
def set_vendor_currency(
    vendor_id: UUID, payload: VendorCurrencyUpdate, container: ContainerDep
) -> VendorCurrencyResponse:
    """Assign a vendor's currency; unsupported codes fall back to the base currency."""
    currency = container.vendor_currency_service.set_currency(
        vendor_id, payload.currency
    )
    return VendorCurrencyResponse(vendor_id=vendor_id, currency=currency)


# Product endpoints
@product_router.post(
    "", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
def create_product(payload: ProductCreate, container: ContainerDep) -> ProductResponse:
    """Create a product, converting vendor-currency prices before it is saved."""
    # Variations belong to whoever owns the parent.
    owner_id = None
    if payload.parent_id is None:
        owner_id = next((v for v in payload.vendor_candidates() if v is not None), None)

    product = Product(
        name=payload.name,
        owner_id=owner_id,
        parent_id=payload.parent_id,
        status=ProductStatus(payload.status or ProductStatus.PUBLISH.value),
        import_source=payload.import_source,
        stock_quantity=payload.stock_quantity,
        regular_price=payload.regular_price,
        sale_price=payload.sale_price,
    )
    product.sync_active_price()

    vendor_id = _resolve_vendor_id(container, payload, product)
    container.conversion_engine.convert_on_incoming_write(
        product, vendor_id, payload.regular_price, payload.sale_price
    )
    container.product_repository.add(product)
    logger.info("product_created", product_id=str(product.id), vendor_id=str(vendor_id))
    return _product_to_response(product)


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: UUID, container: ContainerDep) -> ProductResponse:
    product = container.product_repository.get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return _product_to_response(product)


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID, payload: ProductUpdate, container: ContainerDep
) -> ProductResponse:
    """Update a product.

    Only the fields present in the request body are applied. Prices sent
    with the request are treated as fresh vendor-currency values and
    converted before the product is saved.
    """
    product = container.product_repository.get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    sent = payload.model_fields_set
    if "name" in sent and payload.name is not None:
        product.name = payload.name
    if "status" in sent and payload.status is not None:
        product.status = ProductStatus(payload.status)
    if "import_source" in sent:
        product.import_source = payload.import_source
    if "stock_quantity" in sent:
        product.stock_quantity = payload.stock_quantity

    proposed_regular = None
    proposed_sale = None
    if "regular_price" in sent:
        product.regular_price = payload.regular_price
        proposed_regular = payload.regular_price
    if "sale_price" in sent:
        product.sale_price = payload.sale_price
        proposed_sale = payload.sale_price
    product.sync_active_price()

    vendor_id = _resolve_vendor_id(container, payload, product)
    container.conversion_engine.convert_on_incoming_write(
        product, vendor_id, proposed_regular, proposed_sale
    )
    product.touch()
    container.product_repository.save(product)
    return _product_to_response(product)


@product_router.post("/{product_id}/reconcile", response_model=ReconcileResponse)
def reconcile_product(product_id: UUID, container: ContainerDep) -> ReconcileResponse:
    """Convert a stored product whose prices are still in the vendor's currency."""
    product = container.product_repository.get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    converted = container.conversion_engine.reconcile_existing_entity(product)
    return ReconcileResponse(
        converted=converted, product=_product_to_response(product)
    )


# Integration endpoints
@integration_router.post("/import/{product_id}", response_model=ReconcileResponse)
def import_product_saved(
    product_id: UUID, container: ContainerDep
) -> ReconcileResponse:
    """Notify that the importer saved a product."""
    converted = container.import_hook.handle_product_saved(product_id)
    product = container.product_repository.get(product_id)
    return ReconcileResponse(
        converted=converted,
        product=_product_to_response(product) if product is not None else None,
    )
