# ecocred/db_types.py

from decimal import Decimal

from sqlalchemy import JSON as SA_JSON, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import Enum as SA_Enum, TypeDecorator

# JSONB on PostgreSQL, generic JSON elsewhere
JSONType = SA_JSON().with_variant(JSONB, "postgresql")

# Models pass native_enum=False, so enums are stored as VARCHAR
EnumType = SA_Enum


class Uint256(TypeDecorator):
    """
    Unsigned 256-bit integer column.

    NUMERIC(78, 0) on PostgreSQL; a decimal string everywhere else, since
    SQLite's INTEGER tops out at 64 bits and 18-decimal amounts overflow it.
    Values read back as plain Python ints. Never ORDER BY or SUM this column
    in SQL on non-PostgreSQL backends.
    """
    impl = String(78)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 0))
        return dialect.type_descriptor(String(78))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"Uint256 column cannot store negative value {value}")
        if dialect.name == "postgresql":
            return Decimal(value)
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


__all__ = ["JSONType", "EnumType", "Uint256"]
