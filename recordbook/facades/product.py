"""
Inventory verbs: add, view, search, update, delete, process sale and low-stock
alerts over the `products` store.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from recordbook.config import get_settings
from recordbook.domain.errors import RecordNotFoundError, RecordValidationError
from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.reporter import PRODUCT_COLUMNS
from recordbook.stores.abstract import RecordStore

Number = Union[int, float, Decimal]


class ProductFacade(RecordFacade):
    """
    Products are keyed on name. Quantity and price supplied on add or update
    must be greater than zero; a sale may bring stock down to exactly zero.
    """

    label = "product"
    plural = "products"
    columns = PRODUCT_COLUMNS
    positive_fields = ("quantity", "price")

    def __init__(self, store: RecordStore, low_stock_threshold: Optional[int] = None) -> None:
        super().__init__(store)
        self.low_stock_threshold = low_stock_threshold

    def add(self, name: str, category: str, quantity: int, price: Number) -> OperationResult:
        return self._add(
            {"name": name, "category": category, "quantity": quantity, "price": price}
        )

    def process_sale(self, name: str, quantity: int) -> OperationResult:
        """
        Sell `quantity` units of `name`. Stock is checked and decremented as
        one step; on InsufficientStock nothing changes.
        """

        def operation() -> OperationResult:
            if quantity <= 0:
                raise RecordValidationError(
                    "quantity sold must be greater than zero", field="quantity"
                )
            remaining = self.store.adjust_quantity(name, -quantity)
            record = self.store.find_by_key(name)
            if record is None:
                raise RecordNotFoundError(self.schema.name, name)
            return OperationResult(
                ok=True,
                action="sale",
                message="Sale processed successfully!",
                records=[record],
                quantity=remaining,
            )

        return self._run("sale", operation)

    def low_stock(self, threshold: Optional[int] = None) -> OperationResult:
        """Products with quantity strictly below `threshold` (default 5)."""
        limit = threshold
        if limit is None:
            limit = self.low_stock_threshold
        if limit is None:
            limit = get_settings().low_stock_threshold

        def operation() -> OperationResult:
            records = list(self.store.filter(lambda product: product.quantity < limit))
            message = (
                f"{len(records)} product(s) below {limit}"
                if records
                else "All stocks are sufficient."
            )
            return OperationResult(ok=True, action="low_stock", message=message, records=records)

        return self._run("low_stock", operation)


__all__ = ["ProductFacade"]
