from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class VendorCurrencySetting:
    vendor_id: UUID
    currency: str
    updated_at: datetime = field(default_factory=_utc_now)

    def change_currency(self, currency: str) -> None:
        self.currency = currency
        self.updated_at = _utc_now()
