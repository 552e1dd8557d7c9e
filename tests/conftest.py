"""
Pytest configuration and fixtures for silver-etl tests

This module provides shared fixtures for unit and integration tests.
"""
import os
import shutil
from datetime import date, datetime
from decimal import Decimal

import pytest

from silver_etl.batch.bundle import BronzeBundle
from silver_etl.core.models import (
    CustomerRecord,
    ErpCustomerAttributes,
    ErpLocationAttributes,
    ErpProductCategory,
    ProductRecord,
    SalesRecord,
)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests running several components together"
    )
    config.addinivalue_line(
        "markers", "spark: Tests that need a local Spark session (and a Java runtime)"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session():
    """
    Create a Spark session for testing with local mode

    Skips the requesting test when no Java runtime is available.

    Yields:
        SparkSession configured for local testing
    """
    if shutil.which("java") is None and not os.getenv("JAVA_HOME"):
        pytest.skip("Java runtime not available for Spark")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("silver-etl-test")
        .master("local[1]")
        .config("spark.sql.shuffle.partitions", "1")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .config("spark.driver.memory", "1g")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to the bronze CSV fixtures directory

    Returns:
        Path to tests/fixtures/bronze
    """
    return os.path.join(os.path.dirname(__file__), "fixtures", "bronze")


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_env_vars():
    """
    Set test environment variables

    This fixture loads test.env and sets environment variables
    """
    from dotenv import load_dotenv

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)


@pytest.fixture(scope="session")
def pipeline_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "pipeline.yaml")


# =======================
# ROW FIXTURES
# =======================

@pytest.fixture
def raw_customers() -> list[CustomerRecord]:
    """CRM customers with a duplicated id, a null id and padded fields"""
    return [
        CustomerRecord(
            customer_id=29466, customer_key="AW00029466", first_name=" Lance", last_name="Jimenez ",
            marital_status_code="M", gender_code=None, created_at=datetime(2026, 1, 25),
        ),
        CustomerRecord(
            customer_id=29466, customer_key="AW00029466", first_name="Lance", last_name="Jimenez",
            marital_status_code=" s", gender_code="M", created_at=datetime(2026, 1, 27),
        ),
        CustomerRecord(
            customer_id=11000, customer_key="AW00011000", first_name="Jon", last_name="Yang",
            marital_status_code="M", gender_code=" m ", created_at=datetime(2025, 10, 6),
        ),
        CustomerRecord(
            customer_id=11001, customer_key="AW00011001", first_name="Eugene", last_name="Huang",
            marital_status_code="S", gender_code="n/a", created_at=datetime(2025, 10, 6),
        ),
        CustomerRecord(
            customer_id=None, customer_key="SF566", first_name="Ghost", last_name="Row",
            marital_status_code="S", gender_code="F", created_at=datetime(2025, 10, 6),
        ),
    ]


@pytest.fixture
def raw_sales() -> list[SalesRecord]:
    """Sales rows covering each repair path and each date problem"""
    return [
        SalesRecord(
            order_number="SO43697", product_key="BK-R93R-62", customer_id=21768,
            order_date_raw=20101229, ship_date_raw=20110105, due_date_raw=20110110,
            sales_amount=Decimal("3578"), quantity=1, unit_price=Decimal("3578"),
        ),
        SalesRecord(
            order_number="SO43698", product_key="BK-M82S-44", customer_id=28389,
            order_date_raw=0, ship_date_raw=20110105, due_date_raw=20110110,
            sales_amount=Decimal("30"), quantity=3, unit_price=None,
        ),
        SalesRecord(
            order_number="SO43699", product_key="BK-M82S-44", customer_id=25863,
            order_date_raw=5489, ship_date_raw=20110105, due_date_raw=20110110,
            sales_amount=None, quantity=2, unit_price=Decimal("5"),
        ),
        SalesRecord(
            order_number="SO43700", product_key="BK-R50B-62", customer_id=14501,
            order_date_raw=20101229, ship_date_raw=20110105, due_date_raw=20110110,
            sales_amount=Decimal("699"), quantity=0, unit_price=Decimal("699"),
        ),
        SalesRecord(
            order_number="SO43701", product_key="BK-M82S-44", customer_id=11003,
            order_date_raw=20101329, ship_date_raw=20110105, due_date_raw=20110110,
            sales_amount=Decimal("-40"), quantity=2, unit_price=Decimal("-20"),
        ),
    ]


@pytest.fixture
def raw_products() -> list[ProductRecord]:
    return [
        ProductRecord(
            product_id=210, product_key="CO-RF-FR-R92B-58", name="HL Road Frame - Black- 58",
            cost=None, product_line="R", start_date=date(2003, 7, 1), end_date=None,
        ),
        ProductRecord(
            product_id=212, product_key="AC-HE-HL-U509-R", name=" Sport-100 Helmet- Red",
            cost=Decimal("12"), product_line="S", start_date=date(2011, 7, 1), end_date=date(2012, 6, 30),
        ),
        ProductRecord(
            product_id=213, product_key="AC-HE-HL-U509-R", name="Sport-100 Helmet- Red",
            cost=Decimal("14"), product_line="S", start_date=date(2012, 7, 1), end_date=None,
        ),
        ProductRecord(
            product_id=214, product_key="BI-RB-BK-R93R-62", name="Road-150 Red- 62",
            category_id="BI_RB", cost=Decimal("-5"), product_line="R", start_date=date(2011, 7, 1),
        ),
    ]


@pytest.fixture
def erp_customers() -> list[ErpCustomerAttributes]:
    return [
        ErpCustomerAttributes(source_customer_key="NASAW00011000", gender="Male", birthdate=date(1971, 10, 6)),
        ErpCustomerAttributes(source_customer_key="AW00011001", gender="Female", birthdate=date(1976, 5, 10)),
        ErpCustomerAttributes(source_customer_key="AW00029466", gender="Female", birthdate=None),
        ErpCustomerAttributes(source_customer_key="AW00099999", gender="Male", birthdate=date(1980, 1, 1)),
    ]


@pytest.fixture
def erp_locations() -> list[ErpLocationAttributes]:
    return [
        ErpLocationAttributes(source_customer_key="AW-00011000", country="Australia"),
        ErpLocationAttributes(source_customer_key="AW-00011001", country=" Australia "),
    ]


@pytest.fixture
def erp_categories() -> list[ErpProductCategory]:
    return [
        ErpProductCategory(category_id="AC_HE", category="Accessories", subcategory="Helmets", maintenance="Yes"),
        ErpProductCategory(category_id="CO_RF", category="Components", subcategory="Road Frames", maintenance="No"),
    ]


@pytest.fixture
def bronze_bundle(raw_customers, raw_sales, raw_products, erp_customers, erp_locations, erp_categories):
    return BronzeBundle(
        customers=raw_customers,
        sales=raw_sales,
        products=raw_products,
        erp_customers=erp_customers,
        erp_locations=erp_locations,
        categories=erp_categories,
    )
