import json
import logging
import secrets
import sqlite3
import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import Conflict
from ...domain.models import ProfileCriteria, User
from ...domain.models.user import PROFILE_DOCUMENT_FIELDS
from ...domain.ports.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

COLUMN_FIELDS = (
    "email",
    "mobile_number",
    "password_hash",
    "role",
    "is_verified",
    "is_active",
    "name",
    "gender",
    "date_of_birth",
    "city",
    "state",
    "country",
    "religion",
    "profile_picture",
)

_CONFLICT_MESSAGES = {
    "email": ("email", "An account with this email already exists."),
    "mobile_number": ("mobileNumber", "An account with this mobile number already exists."),
}


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed document store for user records."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.create_function("casefold", 1, _casefold, deterministic=True)
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    mobile_number TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'user',
                    is_verified INTEGER NOT NULL DEFAULT 0,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    name TEXT NOT NULL,
                    gender TEXT NOT NULL,
                    date_of_birth TEXT NOT NULL,
                    city TEXT NOT NULL,
                    state TEXT NOT NULL,
                    country TEXT NOT NULL,
                    religion TEXT,
                    profile_picture TEXT NOT NULL DEFAULT '',
                    profile TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_users_created_at
                    ON users(created_at DESC);

                CREATE INDEX IF NOT EXISTS idx_users_gender
                    ON users(gender);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # UserRepository API ----------------------------------------------------
    def insert_user(self, user: User) -> User:
        now = self._now()
        record = replace(user, id=user.id or secrets.token_hex(12))
        values = self._column_values(record)
        columns = ["id", *COLUMN_FIELDS, "profile", "created_at", "updated_at"]
        params = [record.id, *(values[name] for name in COLUMN_FIELDS), self._dump(record.profile_document()), now, now]
        statement = (
            f"INSERT INTO users ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(statement, params)
            except sqlite3.IntegrityError as exc:
                raise self._conflict_from(exc) from exc
            row = self._fetch_row(record.id)
        if not row:
            raise RuntimeError("Failed to persist user.")
        return self._row_to_user(row)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            row = self._fetch_row(user_id)
        return self._row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE email = ?", (email.lower(),))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def find_by_email_or_mobile(self, email: str, mobile_number: str) -> Optional[User]:
        with self._lock:
            cur = self._conn.execute(
                "SELECT * FROM users WHERE email = ? OR mobile_number = ? LIMIT 1",
                (email.lower(), mobile_number),
            )
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        with self._lock:
            row = self._fetch_row(user_id)
            if not row:
                return None
            current = self._row_to_user(row)
            updated = replace(current, **changes)
            values = self._column_values(updated)
            assignments = [f"{name} = ?" for name in COLUMN_FIELDS]
            params: List[Any] = [values[name] for name in COLUMN_FIELDS]
            assignments += ["profile = ?", "updated_at = ?"]
            params += [self._dump(updated.profile_document()), self._now(), user_id]
            statement = f"UPDATE users SET {', '.join(assignments)} WHERE id = ?"
            try:
                with self._conn:
                    self._conn.execute(statement, params)
            except sqlite3.IntegrityError as exc:
                raise self._conflict_from(exc) from exc
            row = self._fetch_row(user_id)
        return self._row_to_user(row) if row else None

    def delete_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            row = self._fetch_row(user_id)
            if not row:
                return None
            with self._conn:
                self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(row)

    def find_users(self, criteria: ProfileCriteria) -> List[User]:
        where, params = self._where_clause(criteria)
        query = f"SELECT * FROM users{where} ORDER BY created_at DESC, seq DESC LIMIT ? OFFSET ?"
        params += [criteria.limit, criteria.skip]
        with self._lock:
            cur = self._conn.execute(query, params)
            rows = cur.fetchall()
        return [self._row_to_user(row) for row in rows]

    def count_users(self, criteria: Optional[ProfileCriteria] = None) -> int:
        where, params = self._where_clause(criteria) if criteria else ("", [])
        with self._lock:
            cur = self._conn.execute(f"SELECT COUNT(*) AS total FROM users{where}", params)
            row = cur.fetchone()
        return int(row["total"])

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="microseconds")

    @staticmethod
    def _format_instant(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    @staticmethod
    def _dump(document: Dict[str, Any]) -> str:
        return json.dumps(document, default=str, ensure_ascii=False)

    def _fetch_row(self, user_id: str) -> Optional[sqlite3.Row]:
        cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        return cur.fetchone()

    def _where_clause(self, criteria: ProfileCriteria) -> Tuple[str, List[Any]]:
        conditions: List[str] = []
        params: List[Any] = []
        if criteria.exclude_id:
            conditions.append("id != ?")
            params.append(criteria.exclude_id)
        if criteria.gender:
            conditions.append("gender = ?")
            params.append(criteria.gender)
        if criteria.location:
            term = criteria.location.casefold()
            conditions.append(
                "(instr(casefold(city), ?) > 0 OR instr(casefold(state), ?) > 0 "
                "OR instr(casefold(country), ?) > 0)"
            )
            params += [term, term, term]
        if criteria.religion:
            conditions.append("instr(casefold(religion), ?) > 0")
            params.append(criteria.religion.casefold())
        if criteria.born_on_or_after:
            conditions.append("date_of_birth >= ?")
            params.append(criteria.born_on_or_after.isoformat())
        if criteria.born_on_or_before:
            conditions.append("date_of_birth <= ?")
            params.append(criteria.born_on_or_before.isoformat())
        if criteria.created_since:
            conditions.append("created_at >= ?")
            params.append(self._format_instant(criteria.created_since))
        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, params

    @staticmethod
    def _column_values(user: User) -> Dict[str, Any]:
        values = {name: getattr(user, name) for name in COLUMN_FIELDS}
        values["email"] = user.email.lower()
        values["is_verified"] = int(user.is_verified)
        values["is_active"] = int(user.is_active)
        if isinstance(user.date_of_birth, date):
            values["date_of_birth"] = user.date_of_birth.isoformat()
        return values

    @staticmethod
    def _conflict_from(exc: sqlite3.IntegrityError) -> Conflict:
        detail = str(exc)
        for column, (field_name, message) in _CONFLICT_MESSAGES.items():
            if f"users.{column}" in detail:
                logger.info("Uniqueness violation on %s", column)
                return Conflict(message, {field_name: message})
        return Conflict()

    def _row_to_user(self, row: sqlite3.Row) -> User:
        document = json.loads(row["profile"] or "{}")
        profile = {name: document[name] for name in PROFILE_DOCUMENT_FIELDS if name in document}
        return User(
            id=row["id"],
            email=row["email"],
            mobile_number=row["mobile_number"],
            password_hash=row["password_hash"],
            role=row["role"],
            is_verified=bool(row["is_verified"]),
            is_active=bool(row["is_active"]),
            name=row["name"],
            gender=row["gender"],
            date_of_birth=date.fromisoformat(row["date_of_birth"]),
            city=row["city"],
            state=row["state"],
            country=row["country"],
            religion=row["religion"],
            profile_picture=row["profile_picture"],
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
            **profile,
        )
