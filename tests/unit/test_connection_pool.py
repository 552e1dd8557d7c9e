"""
Unit tests for the database connection pool

The psycopg pool is replaced by a mock; no database is needed.
"""
from unittest.mock import MagicMock, patch

import pytest
from psycopg import OperationalError

from silver_etl.warehouse.connection import DatabaseConnectionPool

pytestmark = pytest.mark.unit


def test_password_required(monkeypatch):
    """Test that a pool without password is rejected"""
    monkeypatch.delenv("DB_PASSWORD", raising=False)

    with pytest.raises(ValueError, match="password"):
        DatabaseConnectionPool()


def test_settings_from_environment(monkeypatch, test_env_vars):
    """Test that connection settings fall back to DB_* variables"""
    monkeypatch.setenv("DB_HOST", "warehouse.local")
    monkeypatch.setenv("DB_PORT", "6543")

    pool = DatabaseConnectionPool()

    assert pool.host == "warehouse.local"
    assert pool.port == 6543
    assert pool.password == "test_password"
    assert "dbname=DataWarehouse" in pool.conninfo


def test_get_connection_requires_open_pool():
    pool = DatabaseConnectionPool(password="secret")

    with pytest.raises(RuntimeError, match="not open"):
        with pool.get_connection():
            pass


@patch("silver_etl.warehouse.connection.time.sleep")
@patch("silver_etl.warehouse.connection.ConnectionPool")
def test_open_retries(mock_pool_cls, mock_sleep):
    """Test that open() retries transient connection failures"""
    mock_pool_cls.return_value.open.side_effect = [OperationalError("refused"), None]

    pool = DatabaseConnectionPool(password="secret")
    pool.open(max_retries=3, retry_delay=0.1)

    assert pool.is_open
    assert mock_pool_cls.return_value.open.call_count == 2
    mock_sleep.assert_called_once_with(0.1)


@patch("silver_etl.warehouse.connection.time.sleep")
@patch("silver_etl.warehouse.connection.ConnectionPool")
def test_open_gives_up(mock_pool_cls, mock_sleep):
    mock_pool_cls.return_value.open.side_effect = OperationalError("refused")

    pool = DatabaseConnectionPool(password="secret")

    with pytest.raises(OperationalError, match="after 2 attempts"):
        pool.open(max_retries=2, retry_delay=0)

    assert not pool.is_open
    mock_pool_cls.return_value.close.assert_called_once()


@patch("silver_etl.warehouse.connection.ConnectionPool")
def test_execute_batch_commits(mock_pool_cls):
    conn = MagicMock()
    mock_pool_cls.return_value.connection.return_value.__enter__.return_value = conn
    cursor = conn.cursor.return_value.__enter__.return_value

    with DatabaseConnectionPool(password="secret") as pool:
        count = pool.execute_batch("INSERT INTO t VALUES (%s)", [(1,), (2,)])

    assert count == 2
    cursor.executemany.assert_called_once_with("INSERT INTO t VALUES (%s)", [(1,), (2,)])
    conn.commit.assert_called_once()
    mock_pool_cls.return_value.close.assert_called_once()


def test_execute_batch_empty_is_noop():
    pool = DatabaseConnectionPool(password="secret")
    assert pool.execute_batch("INSERT INTO t VALUES (%s)", []) == 0


@patch("silver_etl.warehouse.connection.ConnectionPool")
def test_fetch_key_assignments(mock_pool_cls):
    conn = MagicMock()
    mock_pool_cls.return_value.connection.return_value.__enter__.return_value = conn
    cursor = conn.cursor.return_value.__enter__.return_value
    cursor.fetchall.return_value = [
        {"customer_id": 11000, "customer_key": 1},
        {"customer_id": 29466, "customer_key": 3},
    ]

    with DatabaseConnectionPool(password="secret") as pool:
        keys = pool.fetch_key_assignments("silver", "dim_customers")

    assert keys == {11000: 1, 29466: 3}
    cursor.execute.assert_called_once_with("SELECT customer_id, customer_key FROM silver.dim_customers")


def test_conninfo_escapes_password():
    pool = DatabaseConnectionPool(password="se cret")

    assert "password='se cret'" in pool.conninfo
