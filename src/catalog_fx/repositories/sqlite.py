"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.products import AUDIT_META_KEYS, FxAuditTrail, Product
from catalog_fx.domain.value_objects import ProductStatus
from catalog_fx.domain.vendors import VendorCurrencySetting
from catalog_fx.exceptions import PersistenceError, ProductNotFoundError
from catalog_fx.repositories.interfaces import (
    ExchangeRateRepository,
    ProductRepository,
    VendorCurrencyRepository,
)


class SQLiteDatabase:
    """SQLite database connection manager."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
            # Enable foreign keys
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- Current exchange rate per currency pair
            CREATE TABLE IF NOT EXISTS fx_rates (
                base_currency TEXT NOT NULL,
                quote_currency TEXT NOT NULL,
                rate TEXT NOT NULL,
                observed_at TEXT NOT NULL,
                source TEXT,
                PRIMARY KEY (base_currency, quote_currency)
            );

            -- Vendor currency settings
            CREATE TABLE IF NOT EXISTS vendor_currencies (
                vendor_id TEXT PRIMARY KEY,
                currency TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            -- Products and variations
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                owner_id TEXT,
                parent_id TEXT,
                status TEXT NOT NULL,
                import_source TEXT,
                stock_quantity INTEGER,
                regular_price TEXT,
                sale_price TEXT,
                price TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (parent_id) REFERENCES products(id)
            );

            -- Product metadata (FX audit trail)
            CREATE TABLE IF NOT EXISTS product_meta (
                product_id TEXT NOT NULL,
                meta_key TEXT NOT NULL,
                meta_value TEXT NOT NULL,
                PRIMARY KEY (product_id, meta_key),
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
            );

            CREATE INDEX IF NOT EXISTS idx_products_owner_id ON products(owner_id);
            CREATE INDEX IF NOT EXISTS idx_products_parent_id ON products(parent_id);
            """
        )
        conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class SQLiteExchangeRateRepository(ExchangeRateRepository):
    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def get_rate(self, base_currency: str, quote_currency: str) -> ExchangeRate | None:
        conn = self._db.get_connection()
        row = conn.execute(
            """
            SELECT * FROM fx_rates
            WHERE base_currency = ? AND quote_currency = ?
            """,
            (base_currency.strip().upper(), quote_currency.strip().upper()),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_exchange_rate(row)

    def upsert(self, rate: ExchangeRate) -> None:
        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO fx_rates (base_currency, quote_currency, rate,
                                      observed_at, source)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (base_currency, quote_currency) DO UPDATE SET
                    rate = excluded.rate,
                    observed_at = excluded.observed_at,
                    source = excluded.source
                """,
                (
                    rate.base_currency,
                    rate.quote_currency,
                    str(rate.rate),
                    rate.observed_at.isoformat(),
                    rate.source,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("rate upsert", str(e)) from e

    def list_all(self) -> Iterable[ExchangeRate]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM fx_rates ORDER BY base_currency, quote_currency"
        ).fetchall()
        return [self._row_to_exchange_rate(row) for row in rows]

    def _row_to_exchange_rate(self, row: sqlite3.Row) -> ExchangeRate:
        return ExchangeRate(
            base_currency=row["base_currency"],
            quote_currency=row["quote_currency"],
            rate=Decimal(row["rate"]),
            observed_at=datetime.fromisoformat(row["observed_at"]),
            source=row["source"],
        )


class SQLiteVendorCurrencyRepository(VendorCurrencyRepository):
    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def get(self, vendor_id: UUID) -> VendorCurrencySetting | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM vendor_currencies WHERE vendor_id = ?", (str(vendor_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_setting(row)

    def set(self, setting: VendorCurrencySetting) -> None:
        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO vendor_currencies (vendor_id, currency, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT (vendor_id) DO UPDATE SET
                    currency = excluded.currency,
                    updated_at = excluded.updated_at
                """,
                (
                    str(setting.vendor_id),
                    setting.currency,
                    setting.updated_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("vendor currency update", str(e)) from e

    def list_all(self) -> Iterable[VendorCurrencySetting]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM vendor_currencies ORDER BY vendor_id"
        ).fetchall()
        return [self._row_to_setting(row) for row in rows]

    def _row_to_setting(self, row: sqlite3.Row) -> VendorCurrencySetting:
        return VendorCurrencySetting(
            vendor_id=UUID(row["vendor_id"]),
            currency=row["currency"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteProductRepository(ProductRepository):
    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def add(self, product: Product) -> None:
        conn = self._db.get_connection()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO products (id, name, owner_id, parent_id, status,
                                          import_source, stock_quantity,
                                          regular_price, sale_price, price,
                                          created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(product.id),
                        product.name,
                        str(product.owner_id) if product.owner_id else None,
                        str(product.parent_id) if product.parent_id else None,
                        product.status.value,
                        product.import_source,
                        product.stock_quantity,
                        product.regular_price,
                        product.sale_price,
                        product.price,
                        product.created_at.isoformat(),
                        product.updated_at.isoformat(),
                    ),
                )
                self._write_meta(conn, product)
        except sqlite3.Error as e:
            raise PersistenceError("product insert", str(e)) from e

    def get(self, product_id: UUID) -> Product | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (str(product_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_product(row)

    def save(self, product: Product) -> None:
        conn = self._db.get_connection()
        try:
            with conn:
                cursor = conn.execute(
                    """
                    UPDATE products SET
                        name = ?,
                        owner_id = ?,
                        parent_id = ?,
                        status = ?,
                        import_source = ?,
                        stock_quantity = ?,
                        regular_price = ?,
                        sale_price = ?,
                        price = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        product.name,
                        str(product.owner_id) if product.owner_id else None,
                        str(product.parent_id) if product.parent_id else None,
                        product.status.value,
                        product.import_source,
                        product.stock_quantity,
                        product.regular_price,
                        product.sale_price,
                        product.price,
                        product.updated_at.isoformat(),
                        str(product.id),
                    ),
                )
                if cursor.rowcount == 0:
                    raise ProductNotFoundError(product.id)
                self._write_meta(conn, product)
        except sqlite3.Error as e:
            raise PersistenceError("product save", str(e)) from e

    def get_owner(self, product_id: UUID) -> UUID | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT owner_id FROM products WHERE id = ?", (str(product_id),)
        ).fetchone()
        if row is None or not row["owner_id"]:
            return None
        return UUID(row["owner_id"])

    def get_parent_owner(self, product_id: UUID) -> UUID | None:
        conn = self._db.get_connection()
        row = conn.execute(
            """
            SELECT parent.owner_id FROM products AS child
            JOIN products AS parent ON parent.id = child.parent_id
            WHERE child.id = ?
            """,
            (str(product_id),),
        ).fetchone()
        if row is None or not row["owner_id"]:
            return None
        return UUID(row["owner_id"])

    def list_all(self) -> Iterable[Product]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM products ORDER BY created_at").fetchall()
        return [self._row_to_product(row) for row in rows]

    def list_by_owner(self, owner_id: UUID) -> Iterable[Product]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM products WHERE owner_id = ? ORDER BY created_at",
            (str(owner_id),),
        ).fetchall()
        return [self._row_to_product(row) for row in rows]

    def _write_meta(self, conn: sqlite3.Connection, product: Product) -> None:
        """Replace the product's FX metadata with the trail's set fields."""
        placeholders = ", ".join("?" for _ in AUDIT_META_KEYS)
        conn.execute(
            f"DELETE FROM product_meta WHERE product_id = ? AND meta_key IN ({placeholders})",
            (str(product.id), *AUDIT_META_KEYS),
        )
        conn.executemany(
            """
            INSERT INTO product_meta (product_id, meta_key, meta_value)
            VALUES (?, ?, ?)
            """,
            [
                (str(product.id), key, value)
                for key, value in product.fx_audit.to_meta().items()
            ],
        )

    def _load_meta(self, product_id: str) -> dict[str, str]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT meta_key, meta_value FROM product_meta WHERE product_id = ?",
            (product_id,),
        ).fetchall()
        return {row["meta_key"]: row["meta_value"] for row in rows}

    def _row_to_product(self, row: sqlite3.Row) -> Product:
        return Product(
            name=row["name"],
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]) if row["owner_id"] else None,
            parent_id=UUID(row["parent_id"]) if row["parent_id"] else None,
            status=ProductStatus(row["status"]),
            import_source=row["import_source"],
            stock_quantity=row["stock_quantity"],
            regular_price=row["regular_price"],
            sale_price=row["sale_price"],
            price=row["price"],
            fx_audit=FxAuditTrail.from_meta(self._load_meta(row["id"])),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
