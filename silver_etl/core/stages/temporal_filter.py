"""
Temporal Filter - keeps the currently valid versions of a slowly-changing table.

A row is current exactly when its end date is null. No recency logic is
involved: an old start date with a null end date is still current.
"""

from collections.abc import Iterable
from typing import Any, TypeVar

from silver_etl.core.models import CurrentProduct, ErpProductCategory, ProductRecord, StageResult
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "temporal_filter"

RowT = TypeVar("RowT")


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name)


class TemporalFilter:
    """
    Filters rows by an explicit validity end marker.

    Works on models and on plain dict rows alike.
    """

    def __init__(self, end_field: str = "end_date"):
        self.end_field = end_field

    def is_current(self, row: Any) -> bool:
        return _field(row, self.end_field) is None

    def current(self, rows: Iterable[RowT]) -> list[RowT]:
        return [row for row in rows if self.is_current(row)]

    def current_products(
        self,
        products: Iterable[ProductRecord],
        categories: Iterable[ErpProductCategory] = (),
    ) -> StageResult[CurrentProduct]:
        """
        Current product versions left-joined to their ERP category.

        Returns:
            StageResult of CurrentProduct; unknown categories leave the category fields null
        """
        products = list(products)
        by_id: dict[str, ErpProductCategory] = {}
        for category in categories:
            by_id.setdefault(category.category_id, category)

        rows = []
        for product in self.current(products):
            category = by_id.get(product.category_id) if product.category_id else None
            rows.append(
                CurrentProduct(
                    product_id=product.product_id,
                    product_key=product.product_key,
                    name=product.name,
                    category_id=product.category_id,
                    category=category.category if category else None,
                    subcategory=category.subcategory if category else None,
                    maintenance=category.maintenance if category else None,
                    cost=product.cost,
                    product_line=product.product_line,
                    start_date=product.start_date,
                )
            )

        logger.info(
            f"Kept {len(rows)} current of {len(products)} product versions",
            extra={"stage": STAGE, "kept": len(rows), "historical": len(products) - len(rows)},
        )
        return StageResult(stage=STAGE, rows=rows)
