"""
Unit tests for per-room inventory locking.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from sqlalchemy.dialects import postgresql

from hotel_booking.config import ROOM_LOCK_NAMESPACE
from hotel_booking.db.locks import lock_room_inventory


def _connection(dialect_name: str) -> Mock:
    conn = Mock()
    conn.dialect.name = dialect_name
    return conn


@pytest.mark.unit
def test_postgresql_takes_transaction_advisory_lock() -> None:
    conn = _connection("postgresql")

    lock_room_inventory(conn, 7)

    conn.execute.assert_called_once()
    statement, params = conn.execute.call_args.args
    assert str(statement) == "SELECT pg_advisory_xact_lock(:namespace, :room_id)"
    assert params == {"namespace": ROOM_LOCK_NAMESPACE, "room_id": 7}


@pytest.mark.unit
def test_other_backends_lock_room_row() -> None:
    conn = _connection("sqlite")

    lock_room_inventory(conn, 7)

    conn.execute.assert_called_once()
    (statement,) = conn.execute.call_args.args
    compiled = statement.compile(dialect=postgresql.dialect())
    assert "FROM rooms" in str(compiled)
    assert str(compiled).rstrip().endswith("FOR UPDATE")
    assert compiled.params == {"room_id_1": 7}
