"""
Surrogate Key Assigner - dense 1-based warehouse keys for dimension rows.

Keys are the rank of each row ordered by its business identifier, so an
unchanged input set always receives the same keys. Every run re-derives
all keys; inserting a customer whose identifier sorts before existing
ones shifts their keys. Callers that need keys to survive such inserts
pass a KeyRegistry holding the previous assignment.
"""

from collections.abc import Iterable, Mapping

from silver_etl.core.models import DimensionRow, StageResult
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "surrogate_key_assigner"


class KeyRegistry:
    """
    Persisted business id -> surrogate key mapping.

    Known identifiers keep their key; new identifiers get the next keys
    after the current maximum, in business-id order. Keys of removed
    customers are never reused, so contiguity is not guaranteed in this mode.
    """

    def __init__(self, assignments: Mapping[int, int] | None = None):
        self._keys: dict[int, int] = dict(assignments or {})
        if len(set(self._keys.values())) != len(self._keys):
            raise ValueError("KeyRegistry assignments must map to distinct keys")

    @classmethod
    def from_rows(cls, rows: Iterable[DimensionRow]) -> "KeyRegistry":
        return cls({row.customer_id: row.customer_key for row in rows if row.customer_key is not None})

    def as_dict(self) -> dict[int, int]:
        return dict(self._keys)

    def key_for(self, business_id: int) -> int:
        """Return the key of an identifier, allocating the next one if unseen."""
        if business_id not in self._keys:
            self._keys[business_id] = max(self._keys.values(), default=0) + 1
        return self._keys[business_id]


class SurrogateKeyAssigner:
    """
    Assigns surrogate keys ordered by customer_id.

    Usage:
        keyed = SurrogateKeyAssigner().assign(dimension_rows)
        [row.customer_key for row in keyed.rows]  # 1..N
    """

    def __init__(self, registry: KeyRegistry | None = None):
        self.registry = registry

    def assign(self, rows: Iterable[DimensionRow]) -> StageResult[DimensionRow]:
        """
        Return keyed copies of the rows, sorted by customer_id.

        Without a registry keys are ROW_NUMBER() over customer_id: 1..N with
        no gaps. The sort is stable, so rows sharing an identifier keep
        their input order.
        """
        ordered = sorted(rows, key=lambda row: row.customer_id)

        if self.registry is None:
            keyed = [row.model_copy(update={"customer_key": rank}) for rank, row in enumerate(ordered, start=1)]
        else:
            seen: set[int] = set()
            for row in ordered:
                if row.customer_id in seen:
                    raise ValueError(f"Duplicate customer_id {row.customer_id} cannot share a registry key")
                seen.add(row.customer_id)
            keyed = [
                row.model_copy(update={"customer_key": self.registry.key_for(row.customer_id)})
                for row in ordered
            ]

        logger.info(f"Assigned surrogate keys to {len(keyed)} rows", extra={"stage": STAGE, "rows": len(keyed)})
        return StageResult(stage=STAGE, rows=keyed)
