import logging
import sqlite3
from datetime import UTC, date, datetime
from types import TracebackType
from typing import Any
from uuid import UUID

from byteletters.domain.entities import User, normalize_email
from byteletters.domain.errors import StoreUnavailable, StoreWriteConflict

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id",
    "email",
    "name",
    "password_hash",
    "is_admin",
    "onboarding_completed",
    "life_expectancy",
    "birth_date",
    "inbox_email",
    "enable_recommendations",
    "google_id",
    "created_at",
    "updated_at",
)

# id, email and created_at are fixed once a row exists
UPDATABLE_COLUMNS = frozenset(USER_COLUMNS) - {"id", "email", "created_at"}

_BOOL_COLUMNS = frozenset({"is_admin", "onboarding_completed", "enable_recommendations"})


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _to_db(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in _BOOL_COLUMNS:
        return 1 if value else 0
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


class SQLiteUserStore:
    """
    User store over a single SQLite connection.

    The connection is acquired on construction and released by close();
    use it as a context manager so release happens on every exit path.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = self._get_conn()

    @classmethod
    def open(cls, db_path: str) -> "SQLiteUserStore":
        return cls(db_path)

    def __enter__(self) -> "SQLiteUserStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _get_conn(self) -> sqlite3.Connection:
        try:
            # Owned by one caller at a time, but FastAPI may hand it across threadpool workers
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = dict_factory
            conn.execute("PRAGMA foreign_keys = ON;")
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open user store at {self.db_path}: {e}") from e
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailable("User store connection is closed")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # --- Reads ---

    def find_by_email(self, email: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (normalize_email(email),))
        return self._map_row_to_user(row) if row else None

    def find_by_inbox_email(self, inbox_email: str) -> User | None:
        row = self._fetch_one(
            "SELECT * FROM users WHERE inbox_email = ?", (inbox_email.strip().lower(),)
        )
        return self._map_row_to_user(row) if row else None

    def get_by_id(self, user_id: UUID) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (str(user_id),))
        return self._map_row_to_user(row) if row else None

    def list_all(self) -> list[User]:
        try:
            rows = self.conn.execute("SELECT * FROM users ORDER BY email").fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Failed to list users: {e}") from e
        return [self._map_row_to_user(row) for row in rows]

    # --- Writes ---

    def insert(self, user: User) -> User:
        placeholders = ", ".join("?" for _ in USER_COLUMNS)
        values = tuple(_to_db(col, getattr(user, col)) for col in USER_COLUMNS)
        try:
            with self.conn:
                self.conn.execute(
                    f"INSERT INTO users ({', '.join(USER_COLUMNS)}) VALUES ({placeholders})",
                    values,
                )
        except sqlite3.IntegrityError as e:
            raise StoreWriteConflict(user.email, str(e)) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Failed to insert user {user.email}: {e}") from e

        logger.debug("Inserted user %s", user.id)
        return user

    def update(self, email: str, fields: dict[str, Any]) -> User:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update user columns: {', '.join(sorted(unknown))}")
        if not fields:
            raise ValueError("No fields to update")

        key = normalize_email(email)
        assignments = ", ".join(f"{col} = ?" for col in fields)
        values = [_to_db(col, val) for col, val in fields.items()]
        try:
            with self.conn:
                cursor = self.conn.execute(
                    f"UPDATE users SET {assignments} WHERE email = ?",
                    (*values, key),
                )
                if cursor.rowcount != 1:
                    raise StoreUnavailable(f"User {key} disappeared during update")
        except sqlite3.IntegrityError as e:
            raise StoreWriteConflict(key, str(e)) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Failed to update user {key}: {e}") from e

        updated = self.find_by_email(key)
        if updated is None:
            raise StoreUnavailable(f"User {key} disappeared during update")
        return updated

    # --- Internals ---

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        try:
            row: dict[str, Any] | None = self.conn.execute(query, params).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"User store query failed: {e}") from e
        return row

    def _map_row_to_user(self, row: dict[str, Any]) -> User:
        def parse_dt(s: str) -> datetime:
            dt = datetime.fromisoformat(s)
            return dt if dt.tzinfo else dt.replace(tzinfo=UTC)

        return User(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"] or "",
            is_admin=bool(row["is_admin"]),
            onboarding_completed=bool(row["onboarding_completed"]),
            life_expectancy=row["life_expectancy"],
            birth_date=date.fromisoformat(row["birth_date"]) if row["birth_date"] else None,
            inbox_email=row["inbox_email"],
            enable_recommendations=bool(row["enable_recommendations"]),
            google_id=row["google_id"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )
