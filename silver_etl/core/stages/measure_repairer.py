"""
Business-Rule Repairer - enforces Sales = Quantity * Price on sales rows.

Quantity is trusted; price and amount are not. Per row, in order:

1. A null or non-positive unit price is back-computed as |sales / quantity|
   (a zero quantity yields None instead of raising).
2. A null, non-positive or inconsistent sales amount is recomputed as
   quantity * |unit price|, using the price from step 1.
3. Rows whose quantity is null or non-positive, or whose measures are
   still unusable after steps 1-2, are excluded and reported as
   unrepairable_measure.

Repaired rows keep the original amount and price next to the new ones.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from silver_etl.core.models import (
    ReasonCode,
    RepairedSalesRecord,
    SalesDates,
    SalesRecord,
    StageResult,
    Violation,
)
from silver_etl.core.validators import RangeValidator, SalesConsistencyValidator, ValidationError
from silver_etl.observability import metrics
from silver_etl.observability.lineage import LineageTracker
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "business_rule_repairer"


def safe_divide(numerator: Decimal | None, denominator: int | Decimal | None) -> Decimal | None:
    """Null-safe division: None when either operand is None or the denominator is zero."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return Decimal(numerator) / Decimal(denominator)


class MeasureRepairer:
    """
    Repairs the sales measures of each row.

    Usage:
        repairer = MeasureRepairer(price_precision=2)
        result = repairer.repair_all(sales_rows, dates.rows)
        result.rows        # RepairedSalesRecord, all invariants hold
        result.violations  # unrepairable_measure / division_by_zero
    """

    def __init__(self, price_precision: int = 2, lineage: LineageTracker | None = None):
        self.quantum = Decimal(1).scaleb(-price_precision)
        self.lineage = lineage
        self._audit_validators = [
            RangeValidator("sales_amount", {"min_exclusive": 0, "required": True}),
            RangeValidator(
                "quantity",
                {"min_exclusive": 0, "required": True, "reason": ReasonCode.UNREPAIRABLE_MEASURE},
            ),
            RangeValidator("unit_price", {"min_exclusive": 0, "required": True}),
            SalesConsistencyValidator("sales_amount"),
        ]

    def _violation(self, record: SalesRecord, reason: ReasonCode, field: str, value, message: str) -> Violation:
        return Violation(
            stage=STAGE,
            reason=reason,
            record_ref=record.order_number,
            field_name=field,
            value=value,
            message=message,
            raw_payload=record.model_dump(mode="json"),
        )

    def list_violations(self, records: Iterable[SalesRecord]) -> list[Violation]:
        """
        List rows breaking the sales business rule, before any repair.

        Read-only; one violation per failing predicate. Invalid quantities
        are reported as unrepairable_measure, everything else as
        inconsistent_measure.
        """
        violations = []
        for record in records:
            payload = record.model_dump()
            for validator in self._audit_validators:
                value = payload.get(validator.field_name)
                try:
                    validator.validate(value, payload)
                except ValidationError as e:
                    violations.append(e.to_violation(STAGE, record.order_number, value, record.model_dump(mode="json")))
        return violations

    def repair(
        self,
        record: SalesRecord,
        dates: SalesDates | None = None,
    ) -> tuple[RepairedSalesRecord | None, list[Violation]]:
        """
        Repair one row.

        Returns:
            (repaired row or None when the row is unrepairable, violations)
        """
        violations: list[Violation] = []
        quantity = record.quantity
        sales = record.sales_amount
        price = record.unit_price
        repairs: list[str] = []

        # Step 1: back-compute the price
        if price is None or price <= 0:
            derived = safe_divide(sales, quantity)
            if derived is None and quantity == 0 and sales is not None:
                violations.append(
                    self._violation(
                        record, ReasonCode.DIVISION_BY_ZERO, "unit_price", sales,
                        "Cannot derive unit_price: quantity is zero",
                    )
                )
            price = abs(derived).quantize(self.quantum, rounding=ROUND_HALF_UP) if derived is not None else None
            repairs.append("unit_price")

        # Step 2: recompute the amount from the (possibly repaired) price
        expected = quantity * abs(price) if quantity is not None and price is not None else None
        if sales is None or sales <= 0 or (expected is not None and sales != expected):
            sales = expected
            repairs.append("sales_amount")

        # Step 3: rows without a usable quantity or measures go to the exceptions
        if quantity is None or quantity <= 0:
            violations.append(
                self._violation(
                    record, ReasonCode.UNREPAIRABLE_MEASURE, "quantity", quantity,
                    "Quantity is null or not positive; no safe repair exists",
                )
            )
            return None, violations

        if price is None or price <= 0 or sales is None or sales <= 0:
            violations.append(
                self._violation(
                    record, ReasonCode.UNREPAIRABLE_MEASURE, "sales_amount", record.sales_amount,
                    "Neither sales_amount nor unit_price yields a positive value",
                )
            )
            return None, violations

        for field in repairs:
            old = getattr(record, field)
            new = price if field == "unit_price" else sales
            metrics.record_repair(field)
            if self.lineage is not None:
                self.lineage.track_measure_repair(record.order_number, field, old, new)

        dates = dates or SalesDates()
        repaired = RepairedSalesRecord(
            order_number=record.order_number,
            product_key=record.product_key,
            customer_id=record.customer_id,
            order_date=dates.order_date,
            ship_date=dates.ship_date,
            due_date=dates.due_date,
            quantity=quantity,
            old_sales_amount=record.sales_amount,
            old_unit_price=record.unit_price,
            sales_amount=sales,
            unit_price=price,
            repairs=repairs,
        )
        return repaired, violations

    def repair_all(
        self,
        records: Iterable[SalesRecord],
        dates: Sequence[SalesDates] | None = None,
    ) -> StageResult[RepairedSalesRecord]:
        """
        Repair every row.

        Args:
            records: Raw sales rows
            dates: Parsed dates aligned one-to-one with records (optional)

        Returns:
            StageResult with repaired rows and the exceptions report
        """
        records = list(records)
        if dates is not None and len(dates) != len(records):
            raise ValueError(f"Got {len(dates)} date rows for {len(records)} sales rows")

        rows = []
        violations = []
        for index, record in enumerate(records):
            repaired, found = self.repair(record, dates[index] if dates is not None else None)
            violations.extend(found)
            if repaired is not None:
                rows.append(repaired)

        repaired_count = sum(1 for row in rows if row.was_repaired)
        logger.info(
            f"Repaired sales measures: {len(rows)} kept ({repaired_count} repaired), "
            f"{len(records) - len(rows)} excluded",
            extra={"stage": STAGE, "kept": len(rows), "repaired": repaired_count},
        )
        return StageResult(stage=STAGE, rows=rows, violations=violations)
