"""
Product cleaning - cost audit, null cost handling and category derivation.
"""

import re
from collections.abc import Iterable
from decimal import Decimal

from silver_etl.core.models import ProductRecord, ReasonCode, StageResult, Violation
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "product_cleaner"

# CO-RF-FR-R92B-58 -> category CO_RF, product key FR-R92B-58
_COMPOSITE_KEY = re.compile(r"^(\w{2})-(\w{2})-(.+)$")


def split_product_key(raw_key: str | None) -> tuple[str | None, str | None]:
    """
    Split a composite product key into (category_id, product_key).

    Keys that do not carry a category prefix come back unchanged with a
    None category.
    """
    if raw_key is None:
        return None, None
    raw_key = raw_key.strip()
    match = _COMPOSITE_KEY.match(raw_key)
    if not match:
        return None, raw_key
    return f"{match.group(1)}_{match.group(2)}", match.group(3)


class ProductCleaner:
    """Standardizes product versions before the temporal filter."""

    def list_violations(self, products: Iterable[ProductRecord]) -> list[Violation]:
        """List products whose cost is null or negative (read-only)."""
        violations = []
        for product in products:
            if product.cost is None or product.cost < 0:
                violations.append(
                    Violation(
                        stage=STAGE,
                        reason=ReasonCode.INVALID_COST,
                        record_ref=str(product.product_id) if product.product_id is not None else product.product_key,
                        field_name="cost",
                        value=product.cost,
                        message="Product cost is null" if product.cost is None else "Product cost is negative",
                        raw_payload=product.model_dump(mode="json"),
                    )
                )
        return violations

    def clean(self, products: Iterable[ProductRecord]) -> StageResult[ProductRecord]:
        """
        Trim names, derive missing category ids and default null costs to 0.

        Negative costs are kept as-is and reported.
        """
        products = list(products)
        violations = self.list_violations(products)

        rows = []
        for product in products:
            updates = {
                "name": product.name.strip() if product.name is not None else None,
                "cost": product.cost if product.cost is not None else Decimal(0),
            }
            if product.category_id is None:
                category_id, product_key = split_product_key(product.product_key)
                updates["category_id"] = category_id
                updates["product_key"] = product_key
            rows.append(product.model_copy(update=updates))

        logger.info(
            f"Cleaned {len(rows)} product versions, {len(violations)} cost findings",
            extra={"stage": STAGE, "rows": len(rows), "cost_findings": len(violations)},
        )
        return StageResult(stage=STAGE, rows=rows, violations=violations)
