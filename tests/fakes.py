"""
In-memory stand-in for the Supabase client.

Implements the subset of the postgrest query builder and of supabase.auth that
the services use. Rows are plain dicts; filters follow PostgREST semantics
closely enough for the API tests (NULL never matches a comparison, ilike uses
% wildcards, or_ takes "col.op.value" terms).
"""

import copy
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and len(value) >= 10 and value[4:5] == "-":
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_pair(left: Any, right: Any):
    left_dt, right_dt = _as_datetime(left), _as_datetime(right)
    if left_dt is not None and right_dt is not None:
        return left_dt, right_dt
    if isinstance(left, bool) and isinstance(right, str):
        return left, right.lower() == "true"
    return left, right


def _compare(op: str, left: Any, right: Any) -> bool:
    if left is None:
        return False
    left, right = _coerce_pair(left, right)
    try:
        if op == "eq":
            return left == right
        if op == "neq":
            return left != right
        if op == "gt":
            return left > right
        if op == "gte":
            return left >= right
        if op == "lt":
            return left < right
        if op == "lte":
            return left <= right
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator {op}")


def _ilike(value: Any, pattern: str) -> bool:
    if value is None:
        return False
    regex = "".join(".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern)
    return re.fullmatch(regex, str(value), flags=re.IGNORECASE | re.DOTALL) is not None


def _term_matches(row: Dict[str, Any], term: str) -> bool:
    column, op, value = term.split(".", 2)
    if op == "is":
        return row.get(column) is None if value == "null" else row.get(column) == (value == "true")
    if op == "ilike":
        return _ilike(row.get(column), value)
    return _compare(op, row.get(column), value)


@dataclass
class FakeResponse:
    data: Any
    count: Optional[int] = None


class FakeAPIError(Exception):
    """Mimics postgrest.APIError: carries a Postgres/PostgREST error code."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.mode = "select"
        self.columns = "*"
        self.count_mode: Optional[str] = None
        self.head = False
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.row_range: Optional[tuple] = None
        self.row_limit: Optional[int] = None

    # statements
    def select(self, columns: str = "*", count: Optional[str] = None, head: bool = False):
        self.columns = columns
        self.count_mode = count
        self.head = head
        return self

    def insert(self, payload):
        self.mode = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]):
        self.mode = "update"
        self.payload = payload
        return self

    def delete(self):
        self.mode = "delete"
        return self

    # filters
    def _add(self, predicate: Callable[[Dict[str, Any]], bool]):
        self.filters.append(predicate)
        return self

    def eq(self, column: str, value: Any):
        return self._add(lambda row: _compare("eq", row.get(column), value))

    def neq(self, column: str, value: Any):
        return self._add(lambda row: _compare("neq", row.get(column), value))

    def gt(self, column: str, value: Any):
        return self._add(lambda row: _compare("gt", row.get(column), value))

    def gte(self, column: str, value: Any):
        return self._add(lambda row: _compare("gte", row.get(column), value))

    def lt(self, column: str, value: Any):
        return self._add(lambda row: _compare("lt", row.get(column), value))

    def lte(self, column: str, value: Any):
        return self._add(lambda row: _compare("lte", row.get(column), value))

    def in_(self, column: str, values: List[Any]):
        allowed = list(values)
        return self._add(lambda row: row.get(column) in allowed)

    def is_(self, column: str, value: Any):
        if value in (None, "null"):
            return self._add(lambda row: row.get(column) is None)
        return self._add(lambda row: row.get(column) == value)

    def ilike(self, column: str, pattern: str):
        return self._add(lambda row: _ilike(row.get(column), pattern))

    def contains(self, column: str, values: List[Any]):
        wanted = set(values)
        return self._add(lambda row: wanted.issubset(set(row.get(column) or [])))

    def or_(self, filters: str):
        terms = [t for t in filters.split(",") if t]
        return self._add(lambda row: any(_term_matches(row, term) for term in terms))

    # modifiers
    def order(self, column: str, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def range(self, start: int, end: int):
        self.row_range = (start, end)
        return self

    def limit(self, size: int):
        self.row_limit = size
        return self

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in self.columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: _as_datetime(r[column]) or r[column], reverse=desc)
            # Postgres puts NULLs last ascending, first descending
            rows = missing + present if desc else present + missing
        return rows

    def execute(self) -> FakeResponse:
        if self.table_name in self.db.failures:
            raise self.db.failures[self.table_name]
        self.db.calls.append((self.table_name, self.mode))
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.mode == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.add_row(self.table_name, item) for item in payload]
            return FakeResponse(data=copy.deepcopy(inserted))

        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.mode == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(data=copy.deepcopy(matched))

        if self.mode == "delete":
            self.db.tables[self.table_name] = [row for row in rows if row not in matched]
            return FakeResponse(data=copy.deepcopy(matched))

        total = len(matched)
        matched = self._sorted(matched)
        if self.row_range is not None:
            start, end = self.row_range
            matched = matched[start:end + 1]
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        if self.db.max_rows is not None:
            matched = matched[:self.db.max_rows]
        return FakeResponse(
            data=[] if self.head else [self._project(row) for row in matched],
            count=total if self.count_mode else None,
        )


@dataclass
class FakeAuthUser:
    id: str
    email: str


@dataclass
class FakeSession:
    access_token: str


@dataclass
class FakeAuthResponse:
    user: Optional[FakeAuthUser] = None
    session: Optional[FakeSession] = None


@dataclass
class FakeAuth:
    """Supabase Auth: email/password accounts and the tokens issued to them."""
    accounts: Dict[str, str] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    get_user_calls: int = 0
    delay_seconds: float = 0.0

    def add_account(self, email: str, password: str = "secret", token: Optional[str] = None) -> str:
        self.accounts[email] = password
        token = token or f"token-{uuid.uuid4()}"
        self.tokens[token] = email
        return token

    def sign_in_with_password(self, credentials: Dict[str, str]) -> FakeAuthResponse:
        email = credentials["email"]
        if self.accounts.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = f"token-{uuid.uuid4()}"
        self.tokens[token] = email
        return FakeAuthResponse(user=FakeAuthUser(id=str(uuid.uuid4()), email=email), session=FakeSession(token))

    def get_user(self, jwt: Optional[str] = None) -> FakeAuthResponse:
        self.get_user_calls += 1
        if self.delay_seconds:
            import time
            time.sleep(self.delay_seconds)
        email = self.tokens.get(jwt)
        if email is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return FakeAuthResponse(user=FakeAuthUser(id=str(uuid.uuid4()), email=email))

    def sign_out(self) -> None:
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[str, Exception] = {}
        # PostgREST max-rows; caps every select response
        self.max_rows: Optional[int] = None
        self.calls: List[tuple] = []
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", _now_iso())
        self.tables.setdefault(table, []).append(stored)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])
