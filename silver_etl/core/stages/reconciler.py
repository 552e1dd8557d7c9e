"""
Cross-Source Reconciler - merges CRM customers with ERP attributes.

CRM drives the join: every CRM customer yields one dimension row and ERP
rows without a CRM customer are ignored. Conflicting attributes are
resolved by an explicit source precedence.
"""

from collections.abc import Iterable, Mapping, Sequence

from silver_etl.core.models import (
    CustomerRecord,
    DimensionRow,
    ErpCustomerAttributes,
    ErpLocationAttributes,
    StageResult,
)
from silver_etl.core.validators import RequiredFieldValidator, ValidationError
from silver_etl.observability.logger import get_logger

from .normalizer import normalize_gender

logger = get_logger(__name__)

STAGE = "cross_source_reconciler"
NOT_AVAILABLE = "n/a"


class SourcePrecedence:
    """
    Ordered source-priority policy.

    The first source, in priority order, holding a real value wins; a
    value is missing when it is None, blank or one of the missing markers.

    Usage:
        policy = SourcePrecedence(["crm", "erp"])
        policy.resolve({"crm": "n/a", "erp": "Female"})  # "Female"
    """

    def __init__(
        self,
        sources: Sequence[str],
        missing_markers: Iterable[str] = (NOT_AVAILABLE,),
        default: str = NOT_AVAILABLE,
    ):
        if not sources:
            raise ValueError("SourcePrecedence requires at least one source")
        if len(set(sources)) != len(sources):
            raise ValueError(f"Duplicate sources in precedence: {list(sources)}")
        self.sources = tuple(sources)
        self.missing_markers = {m.lower() for m in missing_markers}
        self.default = default

    def is_missing(self, value: str | None) -> bool:
        if value is None:
            return True
        stripped = value.strip()
        return stripped == "" or stripped.lower() in self.missing_markers

    def resolve(self, candidates: Mapping[str, str | None]) -> str:
        """
        Pick the winning value.

        Raises:
            ValueError: If candidates name a source the policy does not know
        """
        unknown = set(candidates) - set(self.sources)
        if unknown:
            raise ValueError(f"Unknown sources: {', '.join(sorted(unknown))}")

        for source in self.sources:
            value = candidates.get(source)
            if not self.is_missing(value):
                return value.strip()
        return self.default


class ErpKeyNormalizer:
    """Aligns ERP customer keys with the CRM business key format."""

    def __init__(self, strip_prefixes: Sequence[str] = ("NAS",), remove_chars: Sequence[str] = ("-",)):
        self.strip_prefixes = tuple(p for p in strip_prefixes if p)
        self.remove_chars = tuple(c for c in remove_chars if c)

    def __call__(self, key: str | None) -> str | None:
        if key is None:
            return None
        key = key.strip()
        for prefix in self.strip_prefixes:
            if key.startswith(prefix):
                key = key[len(prefix):]
                break
        for char in self.remove_chars:
            key = key.replace(char, "")
        return key or None


def _index_first(rows, key_of) -> dict:
    index = {}
    for row in rows:
        key = key_of(row.source_customer_key)
        if key is not None and key not in index:
            index[key] = row
    return index


class CustomerReconciler:
    """
    Builds unkeyed dimension rows from CRM customers and ERP attributes.

    Gender follows the precedence policy (CRM first by default); country
    and birthdate come from ERP only.
    """

    def __init__(
        self,
        gender_precedence: SourcePrecedence | None = None,
        key_normalizer: ErpKeyNormalizer | None = None,
    ):
        self.gender_precedence = gender_precedence or SourcePrecedence(["crm", "erp"])
        self.key_normalizer = key_normalizer or ErpKeyNormalizer()
        self._key_validator = RequiredFieldValidator("customer_id")

    def reconcile(
        self,
        customers: Iterable[CustomerRecord],
        erp_customers: Iterable[ErpCustomerAttributes] = (),
        erp_locations: Iterable[ErpLocationAttributes] = (),
    ) -> StageResult[DimensionRow]:
        """
        Left-join CRM customers to the ERP attribute tables.

        Both ERP collections are materialized before joining. When ERP holds
        several rows for one key, the first one is used.

        Returns:
            StageResult with one DimensionRow per CRM customer that has an identifier
        """
        demographics = _index_first(erp_customers, self.key_normalizer)
        locations = _index_first(erp_locations, self.key_normalizer)

        rows = []
        violations = []
        matched = 0
        for customer in customers:
            payload = customer.model_dump(mode="json")
            try:
                self._key_validator.validate(customer.customer_id, payload)
            except ValidationError as e:
                violations.append(e.to_violation(STAGE, customer.customer_key, raw_payload=payload))
                continue

            key = self.key_normalizer(customer.customer_key)
            erp = demographics.get(key)
            location = locations.get(key)
            if erp is not None:
                matched += 1

            # Both sources resolve within the canonical gender labels
            candidates = {
                "crm": normalize_gender(customer.gender_code),
                "erp": normalize_gender(erp.gender) if erp else None,
            }
            gender = self.gender_precedence.resolve(
                {source: value for source, value in candidates.items() if source in self.gender_precedence.sources}
            )
            country = location.country.strip() if location and location.country else NOT_AVAILABLE

            rows.append(
                DimensionRow(
                    customer_id=customer.customer_id,
                    customer_number=customer.customer_key,
                    first_name=customer.first_name,
                    last_name=customer.last_name,
                    country=country,
                    marital_status=customer.marital_status_code or NOT_AVAILABLE,
                    gender=gender,
                    birthdate=erp.birthdate if erp else None,
                    create_date=customer.created_at,
                )
            )

        logger.info(
            f"Reconciled {len(rows)} customers ({matched} matched in ERP)",
            extra={"stage": STAGE, "rows": len(rows), "erp_matched": matched},
        )
        return StageResult(stage=STAGE, rows=rows, violations=violations)
