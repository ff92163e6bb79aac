# db.py — sqlite3 のストアハンドル（CRUD + 任意クエリ実行）
#
# - プロセス開始時に open()、終了時に close()
# - 接続は autocommit。複数文をまとめたいときだけ transaction() を使う
# - sqlite3.Error は読み出し -> RecordLookupError、書き込み -> WriteError に包む

import re
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from config import DB_PATH
from errors import RecordLookupError, WriteError
from models import init_db

IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _ident(name: str) -> str:
    if not IDENT_RE.match(name):
        raise ValueError(f"invalid identifier: {name!r}")
    return name


class Store:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._in_tx = False

    @classmethod
    def open(cls, db_path: str = DB_PATH) -> "Store":
        init_db(db_path)
        conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return cls(conn)

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ===========================
    # 読み出し
    # ===========================
    def execute(self, sql: str, args: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        try:
            rows = self.conn.execute(sql, tuple(args)).fetchall()
        except sqlite3.Error as e:
            raise RecordLookupError(f"failed to run query: {sql}, error: {e}") from e
        return [dict(r) for r in rows]

    def find_by_key(self, table: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        rows = self.execute(
            f"SELECT * FROM {_ident(table)} WHERE {_ident(column)} = ? LIMIT 1", (value,)
        )
        return rows[0] if rows else None

    # ===========================
    # 書き込み
    # ===========================
    def _write(self, sql: str, args: Iterable[Any]) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, tuple(args))
        except sqlite3.Error as e:
            raise WriteError(f"failed to run statement: {sql}, error: {e}") from e

    def insert(self, table: str, values: Dict[str, Any]) -> int:
        cols = [_ident(c) for c in values]
        sql = (
            f"INSERT INTO {_ident(table)} ({', '.join(cols)}) "
            f"VALUES ({', '.join('?' for _ in cols)})"
        )
        return self._write(sql, values.values()).lastrowid

    def update(self, table: str, key_column: str, key: Any, values: Dict[str, Any]):
        sets = ", ".join(f"{_ident(c)} = ?" for c in values)
        sql = f"UPDATE {_ident(table)} SET {sets} WHERE {_ident(key_column)} = ?"
        cur = self._write(sql, [*values.values(), key])
        if cur.rowcount != 1:
            raise WriteError(
                f"unexpected number of rows affected after update of {table} {key_column}={key}: {cur.rowcount}"
            )

    def delete(self, table: str, column: str, value: Any) -> int:
        sql = f"DELETE FROM {_ident(table)} WHERE {_ident(column)} = ?"
        return self._write(sql, (value,)).rowcount

    @contextmanager
    def transaction(self):
        """
        ブロック内の書き込みを 1 単位で確定。例外時はすべて巻き戻す。
        入れ子の場合は外側のトランザクションにまとめる。
        """
        if self._in_tx:
            yield self
            return
        self._write("BEGIN", ())
        self._in_tx = True
        try:
            yield self
        except BaseException:
            self.conn.rollback()
            raise
        else:
            try:
                self.conn.commit()
            except sqlite3.Error as e:
                self.conn.rollback()
                raise WriteError(f"failed to commit transaction: {e}") from e
        finally:
            self._in_tx = False
