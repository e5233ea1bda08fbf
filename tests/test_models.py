from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.dialects import mysql, sqlite

from socialapi.models import Post, Relation, UTCDateTime, User


@pytest.mark.parametrize(
    "column",
    [
        User.__table__.c.created_at,
        User.__table__.c.updated_at,
        Relation.__table__.c.created_at,
        Post.__table__.c.created_at,
        Post.__table__.c.updated_at,
    ],
    ids=lambda c: f"{c.table.name}.{c.name}",
)
def test_mysql_timestamps_keep_microseconds(column):
    assert column.type.compile(dialect=mysql.dialect()) == "DATETIME(6)"


def test_timestamps_stored_naive_and_read_back_as_utc():
    column_type = UTCDateTime()
    dialect = sqlite.dialect()
    local = datetime(2024, 5, 1, 14, 30, 0, 123456, tzinfo=timezone(timedelta(hours=2)))

    stored = column_type.process_bind_param(local, dialect)
    loaded = column_type.process_result_value(stored, dialect)

    assert stored == datetime(2024, 5, 1, 12, 30, 0, 123456)
    assert loaded.tzinfo is timezone.utc
    assert loaded == local
