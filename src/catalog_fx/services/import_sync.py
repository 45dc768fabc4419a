"""Post-save hook for products written by the catalog importer.

The importer saves products directly instead of going through the API, so
their prices may still be in the vendor's currency. Only products carrying
the importer's ``import_source`` marker are reconciled.
"""

from uuid import UUID

from catalog_fx.domain.value_objects import ProductStatus
from catalog_fx.logging_config import get_logger, log_context
from catalog_fx.repositories.interfaces import ProductRepository
from catalog_fx.services.price_conversion import PriceConversionEngine

logger = get_logger(__name__)

_IGNORED_STATUSES = {ProductStatus.TRASH, ProductStatus.AUTO_DRAFT}


class ImportSyncHook:
    def __init__(
        self,
        product_repo: ProductRepository,
        engine: PriceConversionEngine,
        source_marker: str,
    ) -> None:
        self._products = product_repo
        self._engine = engine
        self._source_marker = source_marker

    def handle_product_saved(self, product_id: UUID) -> bool:
        """Reconcile an imported product; returns True if it was converted."""
        with log_context(product_id=str(product_id)):
            product = self._products.get(product_id)
            if product is None:
                logger.debug("import_hook_skipped", reason="not_found")
                return False
            if product.status in _IGNORED_STATUSES:
                logger.debug("import_hook_skipped", reason=product.status.value)
                return False
            if (product.import_source or "") != self._source_marker:
                logger.debug("import_hook_skipped", reason="not_imported")
                return False
            return self._engine.reconcile_existing_entity(product)
