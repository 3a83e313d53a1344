"""Apply database/schema.sql and database/seed.sql through mysql-connector."""
from __future__ import annotations

import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector
import structlog

from .connection import DBConfig

log = structlog.get_logger(__name__)

# The scripts carry their own CREATE DATABASE / USE lines for manual runs;
# bootstrap targets whatever DB_CONFIG names instead.
_DB_SELECTION = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


def split_sql_script(sql: str) -> Iterator[str]:
    """Yield the statements of a script, skipping `--` comments.

    Semicolons inside quoted strings do not end a statement.
    """
    statement: list[str] = []
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            statement.append(ch)
            if ch == "\\" and i + 1 < len(sql):
                statement.append(sql[i + 1])
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            statement.append(ch)
        elif sql.startswith("--", i):
            newline = sql.find("\n", i)
            i = len(sql) if newline < 0 else newline
            continue
        elif ch == ";":
            text = "".join(statement).strip()
            if text:
                yield text
            statement = []
        else:
            statement.append(ch)
        i += 1

    text = "".join(statement).strip()
    if text:
        yield text


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with closing(mysql.connector.connect(**target.connect_kwargs(with_database=False))) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def run_sql_file(db_config: dict, path: str | Path) -> int:
    """Execute every statement of a script in one transaction; returns the statement count."""
    sql = _DB_SELECTION.sub("", Path(path).read_text(encoding="utf-8"))
    target = DBConfig.from_dict(db_config)

    count = 0
    with closing(mysql.connector.connect(**target.connect_kwargs())) as conn:
        cur = conn.cursor()
        for statement in split_sql_script(sql):
            cur.execute(statement)
            count += 1
        conn.commit()
    return count


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = run_sql_file(db_config, schema_path)
    log.info("database.schema_applied", path=str(schema_path), statements=count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = run_sql_file(db_config, seed_path)
    log.info("database.seed_applied", path=str(seed_path), statements=count)


def list_tables(db_config: dict) -> list[str]:
    with closing(mysql.connector.connect(**DBConfig.from_dict(db_config).connect_kwargs())) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
