"""Repository for the SkuRecord aggregate (the inventory ledger store)."""

from protean.exceptions import ObjectNotFoundError

from fulfillment.domain import fulfillment
from fulfillment.errors import UnknownSKU
from fulfillment.stock.stock import SkuRecord


@fulfillment.repository(part_of=SkuRecord)
class SkuRecordRepository:
    def get_known(self, sku: str) -> SkuRecord:
        """Fetch a SKU record, translating a miss into UnknownSKU."""
        try:
            return self.get(sku)
        except ObjectNotFoundError:
            raise UnknownSKU(f"SKU not found: {sku}") from None

    def find(self, sku: str) -> SkuRecord | None:
        try:
            return self.get(sku)
        except ObjectNotFoundError:
            return None

    def all_records(self) -> list[SkuRecord]:
        return sorted(self._dao.query.all().items, key=lambda r: r.sku)

    def locations(self) -> dict[str, str]:
        """Current storage location of every SKU, keyed by SKU code."""
        return {record.sku: record.location for record in self.all_records()}
