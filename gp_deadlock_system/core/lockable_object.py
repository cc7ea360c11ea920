"""Lockable resources: the object part of a pg_locks row."""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .exceptions import MalformedRow

# (field, label) in pg_locks column order; drives both parsing and description
OBJECT_FIELDS = (
    ('gp_segment_id', 'seg'),
    ('locktype', 'type'),
    ('database', 'db'),
    ('relation', 'rel'),
    ('page', 'page'),
    ('tuple', 'tuple'),
    ('virtualxid', 'virtualxid'),
    ('transactionid', 'xid'),
    ('classid', 'classid'),
    ('objid', 'objid'),
    ('objsubid', 'objsubid'),
)

# Column types accepted from a snapshot; psycopg2 returns xid as text
FIELD_TYPES = {
    'locktype': (str,),
    'virtualxid': (str,),
    'transactionid': (int, str),
}


@dataclass(frozen=True)
class LockableObject:
    """
    A lockable resource as reported by pg_locks.

    Every field is optional and None means the column was NULL. Equality and
    hashing cover all fields, so a relation lock and a transaction lock never
    compare equal even when their present fields coincide.
    """
    gp_segment_id: Optional[int] = None
    locktype: Optional[str] = None
    database: Optional[int] = None
    relation: Optional[int] = None
    page: Optional[int] = None
    tuple: Optional[int] = None
    virtualxid: Optional[str] = None
    transactionid: Optional[int] = None
    classid: Optional[int] = None
    objid: Optional[int] = None
    objsubid: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], row_index: int = None) -> "LockableObject":
        """
        Build from a snapshot row; missing keys count as NULL.

        Raises:
            MalformedRow: If a present column is not of its pg_locks type
        """
        values = {}
        for f in fields(cls):
            value = row.get(f.name)
            expected = FIELD_TYPES.get(f.name, (int,))
            if value is not None and (isinstance(value, bool) or not isinstance(value, expected)):
                raise MalformedRow(f.name, row_index, value)
            values[f.name] = value
        return cls(**values)

    def describe(self) -> str:
        parts = []
        for name, label in OBJECT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                parts.append(f"{label}:{value}")
        return ";".join(parts)

    def __str__(self) -> str:
        return self.describe()
