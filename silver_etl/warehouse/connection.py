"""
PostgreSQL connection pool for the silver sink, using psycopg3.

The writers, the lineage tracker and the surrogate-key registry go through
this pool; the cleaning stages never touch it.
"""
import os
import time
from contextlib import contextmanager

from psycopg import OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from silver_etl.observability.logger import get_logger
from silver_etl.utils.validation import qualified_table

logger = get_logger(__name__)

ENV_DEFAULTS = {
    "DB_HOST": "localhost",
    "DB_PORT": "5432",
    "DB_NAME": "DataWarehouse",
    "DB_USER": "etl",
}


class DatabaseConnectionPool:
    """
    Pooled connections to the warehouse database.

    Arguments left as None are read from DB_HOST, DB_PORT, DB_NAME, DB_USER
    and DB_PASSWORD. The pool is created lazily by open() so that building
    one (for instance in a dry run that never writes) costs nothing.

    Usage:
        with DatabaseConnectionPool(password="...") as pool:
            pool.execute_batch("INSERT INTO silver.t VALUES (%s)", [(1,), (2,)])
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 30.0,
    ) -> None:
        """
        Raises:
            ValueError: If no password is given or configured
        """
        self.host = host or os.getenv("DB_HOST", ENV_DEFAULTS["DB_HOST"])
        self.port = port or int(os.getenv("DB_PORT", ENV_DEFAULTS["DB_PORT"]))
        self.database = database or os.getenv("DB_NAME", ENV_DEFAULTS["DB_NAME"])
        self.user = user or os.getenv("DB_USER", ENV_DEFAULTS["DB_USER"])
        self.password = password or os.getenv("DB_PASSWORD")

        if not self.password:
            raise ValueError("Database password must be provided via DB_PASSWORD or the password argument")

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=int(self.timeout),
        )
        self._pool: ConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying refused connections with a doubling delay.

        Raises:
            OperationalError: If the database is still unreachable after max_retries attempts
        """
        if self._pool is not None:
            return

        pool = ConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )

        delay = retry_delay
        for attempt in range(1, max_retries + 1):
            try:
                pool.open(wait=True, timeout=self.timeout)
            except OperationalError as e:
                if attempt == max_retries:
                    pool.close()
                    raise OperationalError(
                        f"Failed to connect to {self.host}:{self.port}/{self.database} "
                        f"after {max_retries} attempts: {e}"
                    ) from e
                logger.warning(f"Database connection attempt {attempt} failed, retrying in {delay}s: {e}")
                time.sleep(delay)
                delay *= 2
            else:
                self._pool = pool
                logger.info(f"Connected to {self.host}:{self.port}/{self.database}")
                return

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection; the caller commits.

        Raises:
            RuntimeError: If the pool is not open
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    def execute_batch(self, command: str, params_list: list[tuple]) -> int:
        """
        Execute a command once per parameter set inside one transaction.

        Returns:
            Number of parameter sets executed
        """
        if not params_list:
            return 0

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(command, params_list)
            conn.commit()
        return len(params_list)

    def fetch_key_assignments(self, schema: str, table: str) -> dict[int, int]:
        """
        Read the customer_id -> customer_key pairs of a customer dimension table.

        Used to seed a KeyRegistry so that existing customers keep their
        surrogate keys across runs.
        """
        query = f"SELECT customer_id, customer_key FROM {qualified_table(schema, table)}"
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
                rows = cur.fetchall()
        return {row["customer_id"]: row["customer_key"] for row in rows}

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
