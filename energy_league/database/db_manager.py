import logging
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from energy_league.utils.env import get_settings

T = TypeVar('T')

logger = logging.getLogger(__name__)


def require_connection(func: Callable) -> Callable:
    '''Decorator to ensure DBManager is used within a context manager.'''

    @wraps(func)
    def wrapper(self: 'DBManager', *args, **kwargs) -> Any:
        if not self._connected:
            raise RuntimeError(
                'DBManager is not in a context. Use "with DBManager() as db:"'
            )
        return func(self, *args, **kwargs)

    return wrapper


def _database_url(db_url: Optional[str] = None) -> str:
    url = db_url or get_settings().database_url
    if not url:
        raise RuntimeError('DATABASE_URL is not set.')
    return url


class DBManager:
    '''
    One Postgres transaction per `with` block: commit on a clean exit,
    rollback when the block raises.
    '''

    # Shared pool across the process
    _pool: Optional[ConnectionPool] = None

    def __init__(self) -> None:
        self._connected: bool = False
        self._pg_conn: Any | None = None
        self._from_pool: bool = False
        self._statements: int = 0

    @classmethod
    def init_pool(
        cls,
        db_url: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> None:
        '''Initialize a global connection pool for reuse across requests.'''
        if cls._pool is not None:
            return
        settings = get_settings()
        cls._pool = ConnectionPool(
            conninfo=_database_url(db_url),
            min_size=min_size or settings.db_pool_min_size,
            max_size=max_size or settings.db_pool_max_size,
            kwargs={'row_factory': dict_row},
        )
        logger.info('Initialized Postgres connection pool')

    @classmethod
    def close_pool(cls) -> None:
        if cls._pool is not None:
            try:
                cls._pool.close()
            finally:
                cls._pool = None

    def _acquire(self) -> None:
        pool = self.__class__._pool
        if pool is not None:
            self._pg_conn = pool.getconn()
            self._from_pool = True
        else:
            self._pg_conn = psycopg.connect(_database_url(), row_factory=dict_row)
            self._from_pool = False

    def _release(self) -> None:
        pool = self.__class__._pool
        try:
            if self._pg_conn is None:
                return
            if self._from_pool and pool is not None:
                # A broken connection is discarded by the pool on put
                pool.putconn(self._pg_conn)
            else:
                self._pg_conn.close()
        finally:
            self._pg_conn = None
            self._from_pool = False

    def __enter__(self) -> 'DBManager':
        self._acquire()
        self._connected = True
        self._statements = 0
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._connected:
            return
        try:
            if exc_type is None:
                self._pg_conn.commit()
            else:
                self._pg_conn.rollback()
        finally:
            self._release()
            self._connected = False

    def _run_with_retry(self, fn: Callable[[], T]) -> T:
        '''
        Run a statement; on a dropped connection reconnect and retry once.
        Only the first statement of a transaction is retried, later ones would
        commit without the work the lost connection rolled back.
        '''
        first_statement = self._statements == 0
        self._statements += 1
        try:
            return fn()
        except (psycopg.OperationalError, psycopg.InterfaceError) as e:
            if not first_statement:
                raise
            logger.warning(
                f'DB operation failed due to connection issue: {e}. '
                f'Reconnecting and retrying once...'
            )
            try:
                self._release()
            except Exception as close_error:
                logger.warning(f'Error while closing broken connection: {close_error}')
            self._acquire()
            return fn()

    def _exec(self, query: str, params: Iterable[Any] | None) -> None:
        assert self._pg_conn is not None
        with self._pg_conn.cursor() as cur:
            cur.execute(query, tuple(params or ()))

    def _select(self, query: str, params: Iterable[Any] | None) -> List[dict[str, Any]]:
        assert self._pg_conn is not None
        with self._pg_conn.cursor() as cur:
            cur.execute(query, tuple(params or ()))
            return cur.fetchall()

    @require_connection
    def execute(self, query: str, params: Iterable[Any] | None = None) -> None:
        '''Execute a statement that returns no rows.'''
        try:
            self._run_with_retry(lambda: self._exec(query, params))
        except Exception as e:
            logger.error(f'Postgres execute() error: {e}\nQuery: {query}\nParams: {params}')
            raise

    @require_connection
    def executemany(self, query: str, param_list: Iterable[Sequence[Any]]) -> None:
        params = [tuple(p) for p in param_list]

        def _do() -> None:
            assert self._pg_conn is not None
            with self._pg_conn.cursor() as cur:
                cur.executemany(query, params)

        try:
            self._run_with_retry(_do)
        except Exception as e:
            logger.error(f'Postgres executemany() error: {e}\nQuery: {query}')
            raise

    @require_connection
    def fetchall(
        self, query: str, params: Iterable[Any] | None = None
    ) -> List[dict[str, Any]]:
        '''Return all rows as dictionaries.'''
        try:
            return self._run_with_retry(lambda: self._select(query, params))
        except Exception as e:
            logger.error(f'Postgres fetchall() error: {e}\nQuery: {query}\nParams: {params}')
            raise

    @require_connection
    def fetchone(
        self, query: str, params: Iterable[Any] | None = None
    ) -> Optional[dict[str, Any]]:
        '''Return the first row as a dictionary, or None.'''
        rows = self.fetchall(query, params)
        return rows[0] if rows else None
