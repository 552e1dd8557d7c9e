"""
Bronze extract reader: loads the six CRM/ERP CSV extracts into row models.

Column names follow the source systems; mapping to models happens row by
row so a row that cannot be coerced is reported as malformed_row and
skipped instead of failing the whole extract.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError
from pyspark.sql import SparkSession

from silver_etl.batch.bundle import BronzeBundle
from silver_etl.core.models import (
    CustomerRecord,
    ErpCustomerAttributes,
    ErpLocationAttributes,
    ErpProductCategory,
    ProductRecord,
    ReasonCode,
    SalesRecord,
    Violation,
)
from silver_etl.observability import metrics
from silver_etl.observability.logger import get_logger

from .csv_reader import CSVReader

logger = get_logger(__name__)

STAGE = "bronze_reader"


class Extract:
    """One bronze extract: file name, target model and column mapping."""

    def __init__(
        self,
        name: str,
        entity: str,
        model: type[BaseModel],
        columns: dict[str, str],
        key_column: str,
        required: bool = True,
        optional_columns: tuple[str, ...] = (),
    ):
        self.name = name
        self.entity = entity
        self.model = model
        self.columns = columns
        self.key_column = key_column
        self.required = required
        self.optional_columns = optional_columns

    @property
    def file_name(self) -> str:
        return f"{self.name}.csv"


EXTRACTS = [
    Extract(
        "crm_cust_info",
        "customers",
        CustomerRecord,
        {
            "cst_id": "customer_id",
            "cst_key": "customer_key",
            "cst_firstname": "first_name",
            "cst_lastname": "last_name",
            "cst_marital_status": "marital_status_code",
            "cst_gndr": "gender_code",
            "cst_create_date": "created_at",
        },
        key_column="cst_id",
    ),
    Extract(
        "crm_prd_info",
        "products",
        ProductRecord,
        {
            "prd_id": "product_id",
            "prd_key": "product_key",
            "cat_id": "category_id",
            "prd_nm": "name",
            "prd_cost": "cost",
            "prd_line": "product_line",
            "prd_start_dt": "start_date",
            "prd_end_dt": "end_date",
        },
        key_column="prd_id",
        optional_columns=("cat_id",),
    ),
    Extract(
        "crm_sales_details",
        "sales",
        SalesRecord,
        {
            "sls_ord_num": "order_number",
            "sls_prd_key": "product_key",
            "sls_cust_id": "customer_id",
            "sls_order_dt": "order_date_raw",
            "sls_ship_dt": "ship_date_raw",
            "sls_due_dt": "due_date_raw",
            "sls_sales": "sales_amount",
            "sls_quantity": "quantity",
            "sls_price": "unit_price",
        },
        key_column="sls_ord_num",
    ),
    Extract(
        "erp_cust_az12",
        "erp_customers",
        ErpCustomerAttributes,
        {"cid": "source_customer_key", "gen": "gender", "bdate": "birthdate"},
        key_column="cid",
        required=False,
    ),
    Extract(
        "erp_loc_a101",
        "erp_locations",
        ErpLocationAttributes,
        {"cid": "source_customer_key", "cntry": "country"},
        key_column="cid",
        required=False,
    ),
    Extract(
        "erp_px_cat_g1v2",
        "categories",
        ErpProductCategory,
        {"id": "category_id", "cat": "category", "subcat": "subcategory", "maintenance": "maintenance"},
        key_column="id",
        required=False,
    ),
]


def map_rows(
    rows: Iterable[dict[str, Any]],
    extract: Extract,
) -> tuple[list[BaseModel], list[Violation]]:
    """
    Map raw extract rows (column name -> value) to models.

    Column names are matched case-insensitively; unknown columns are ignored.

    Returns:
        (models, malformed_row violations)
    """
    records = []
    violations = []
    for row in rows:
        raw = {str(k).strip().lower(): v for k, v in row.items()}
        data = {field: raw.get(column) for column, field in extract.columns.items() if column in raw}
        try:
            records.append(extract.model.model_validate(data))
        except ModelValidationError as e:
            ref = raw.get(extract.key_column)
            logger.debug(f"Malformed {extract.name} row {ref}: {e.error_count()} errors")
            violations.append(
                Violation(
                    stage=STAGE,
                    reason=ReasonCode.MALFORMED_ROW,
                    record_ref=str(ref) if ref is not None else None,
                    field_name=".".join(str(p) for p in e.errors()[0]["loc"]),
                    message=f"{extract.name}: {e.errors()[0]['msg']}",
                    raw_payload={k: (str(v) if v is not None else None) for k, v in raw.items()},
                )
            )
    return records, violations


class BronzeReader:
    """
    Reads a directory holding the bronze CSV extracts.

    Usage:
        bundle = BronzeReader(spark).read_directory("data/bronze")
        bundle.customers  # list[CustomerRecord]
    """

    def __init__(self, spark: SparkSession):
        self.csv_reader = CSVReader(spark)

    def read_extract(self, path: Path, extract: Extract) -> tuple[list[BaseModel], list[Violation]]:
        columns, rows = self.csv_reader.read_rows(str(path))
        missing = [c for c in extract.columns if c not in columns and c not in extract.optional_columns]
        if missing:
            logger.warning(f"{extract.file_name} lacks columns {missing}; they are read as null")
        metrics.observe_histogram(metrics.batch_size, len(rows), entity=extract.entity)
        return map_rows(rows, extract)

    def read_directory(self, input_dir: str | Path) -> BronzeBundle:
        """
        Read every extract found in a directory.

        Raises:
            FileNotFoundError: If the directory or a CRM extract is missing
        """
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")

        loaded: dict[str, list] = {}
        malformed: list[Violation] = []
        for extract in EXTRACTS:
            path = input_dir / extract.file_name
            if not path.exists():
                if extract.required:
                    raise FileNotFoundError(f"Required extract not found: {path}")
                logger.warning(f"Optional extract not found, continuing without it: {path}")
                loaded[extract.entity] = []
                continue

            records, violations = self.read_extract(path, extract)
            loaded[extract.entity] = records
            malformed.extend(violations)
            logger.info(
                f"Read {len(records)} rows from {extract.file_name} ({len(violations)} malformed)",
                extra={"extract": extract.name, "rows": len(records), "malformed": len(violations)},
            )

        return BronzeBundle(**loaded, malformed=malformed)
