from contextlib import contextmanager
from typing import Any, ClassVar, Iterable, Iterator, Optional, cast

from energy_league.database.db_manager import DBManager


class BaseModel:
    '''
    Thin table gateway. Every helper opens its own transaction unless an
    open `DBManager` is passed in as `db`, in which case it joins that one.
    '''

    table: ClassVar[str]
    pk: ClassVar[str] = 'id'

    @classmethod
    @contextmanager
    def session(cls, db: Optional[DBManager] = None) -> Iterator[DBManager]:
        if db is not None:
            yield db
            return
        with DBManager() as own:
            yield own

    @classmethod
    def get(
        cls, id_value: Any, db: Optional[DBManager] = None
    ) -> Optional[dict[str, Any]]:
        with cls.session(db) as conn:
            row = conn.fetchone(
                f'SELECT * FROM {cls.table} WHERE {cls.pk} = %s', (id_value,)
            )
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def get_many(
        cls,
        where: str = '',
        params: Iterable[Any] = (),
        order_by: str = '',
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        db: Optional[DBManager] = None,
    ) -> list[dict[str, Any]]:
        query_parts: list[str] = [f'SELECT * FROM {cls.table}']
        parameters: tuple[Any, ...] = tuple(params)

        if where:
            query_parts.append(f'WHERE {where}')
        if order_by:
            query_parts.append(f'ORDER BY {order_by}')
        if limit is not None:
            query_parts.append('LIMIT %s')
            parameters = (*parameters, limit)
        if offset:
            query_parts.append('OFFSET %s')
            parameters = (*parameters, offset)

        with cls.session(db) as conn:
            rows = conn.fetchall(' '.join(query_parts), parameters)
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def count(
        cls, where: str = '', params: Iterable[Any] = (), db: Optional[DBManager] = None
    ) -> int:
        where_clause = f' WHERE {where}' if where else ''
        with cls.session(db) as conn:
            row = conn.fetchone(
                f'SELECT COUNT(*) AS n FROM {cls.table}{where_clause}', tuple(params)
            )
        return int(row['n']) if row else 0

    @classmethod
    def create(
        cls, values: dict[str, Any], db: Optional[DBManager] = None
    ) -> dict[str, Any]:
        cols = list(values.keys())
        placeholders = ', '.join(['%s'] * len(cols))
        sql = (
            f'INSERT INTO {cls.table} ({", ".join(cols)}) '
            f'VALUES ({placeholders}) RETURNING *'
        )
        with cls.session(db) as conn:
            row = conn.fetchone(sql, tuple(values[c] for c in cols))
        return cast(dict[str, Any], row) if row else cast(dict[str, Any], {})

    @classmethod
    def update(
        cls, id_value: Any, values: dict[str, Any], db: Optional[DBManager] = None
    ) -> dict[str, Any]:
        if not values:
            current = cls.get(id_value, db=db)
            return current if current is not None else cast(dict[str, Any], {})
        sets = ', '.join([f'{k} = %s' for k in values.keys()])
        sql = f'UPDATE {cls.table} SET {sets} WHERE {cls.pk} = %s RETURNING *'
        with cls.session(db) as conn:
            row = conn.fetchone(sql, (*values.values(), id_value))
        return cast(dict[str, Any], row) if row else cast(dict[str, Any], {})
