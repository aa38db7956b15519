import atexit
import os
import pickle
import threading
import uuid
from datetime import date, datetime, timezone

from rentease import config
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.store")

TABLES = ("users", "profiles", "cars", "bookings", "reviews")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Store:
    """
    Table store: one dict of rows per table, keyed by row id, pickled to disk.
    Mirrors the select/insert/update/delete surface of a hosted table API.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path or config.data_path())
        self.users: dict[str, dict] = {}
        self.profiles: dict[str, dict] = {}
        self.cars: dict[str, dict] = {}
        self.bookings: dict[str, dict] = {}
        self.reviews: dict[str, dict] = {}
        self._rw = threading.RLock()

        LOG.info("Using file: %s", self.path)
        self._load()

        # Automatically save on exit (skipped in test environments)
        if not Store._atexit_registered and not config.is_test_env():
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
        return cls._inst

    @classmethod
    def reset_instance(cls, store=None):
        """Swap the singleton (used by scripts and tests)."""
        with cls._inst_lock:
            cls._inst = store

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            LOG.warning("Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            for table in TABLES:
                setattr(self, table, data.get(table, {}) or {})
            LOG.info(
                "Loaded: %s",
                ", ".join(f"{t}={len(getattr(self, t))}" for t in TABLES),
            )
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                LOG.warning("Incompatible store (%s); backed up to %s. Starting empty.",
                            type(data).__name__, bak)
            except OSError as e:
                LOG.error("Backup failed: %s", e)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {table: getattr(self, table) for table in TABLES}
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            LOG.debug("Saving to %s", self.path)
            self._dump()

    def clear(self):
        with self._rw:
            for table in TABLES:
                getattr(self, table).clear()
            self._dump()

    def locked(self):
        """Hold the store lock across a read-then-write sequence (re-entrant)."""
        return self._rw

    # ---------- Generic table access ----------
    def _table(self, name: str) -> dict:
        if name not in TABLES:
            raise KeyError(f"Unknown table: {name}")
        return getattr(self, name)

    def select(self, table: str, order_by: str | None = None, desc: bool = False, **filters) -> list[dict]:
        """
        Rows matching every equality filter. A list/tuple/set filter value
        means "column in values".
        """
        rows = []
        for row in self._table(table).values():
            ok = True
            for col, expected in filters.items():
                value = row.get(col)
                if isinstance(expected, (list, tuple, set, frozenset)):
                    if value not in expected:
                        ok = False
                        break
                elif value != expected:
                    ok = False
                    break
            if ok:
                rows.append(row)
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""), reverse=desc)
        return rows

    def get(self, table: str, row_id) -> dict | None:
        if row_id is None:
            return None
        return self._table(table).get(str(row_id))

    def insert(self, table: str, row: dict) -> str:
        """Insert a row, assigning ``id`` and ``created_at``; return the id."""
        with self._rw:
            rid = str(row.get("id") or uuid.uuid4())
            data = dict(row)
            data["id"] = rid
            data.setdefault("created_at", _now_iso())
            self._table(table)[rid] = data
            self._dump()
            return rid

    def update(self, table: str, row_id, updates: dict) -> bool:
        with self._rw:
            row = self._table(table).get(str(row_id))
            if row is None:
                return False
            row.update(updates)
            self._dump()
            return True

    def delete(self, table: str, row_id) -> bool:
        with self._rw:
            rows = self._table(table)
            if str(row_id) in rows:
                del rows[str(row_id)]
                self._dump()
                return True
            return False

    # ---------- Users ----------
    def find_user(self, email: str) -> dict | None:
        """Find an auth user by (case-insensitive) email."""
        email = (email or "").strip().lower()
        for u in self.users.values():
            if u["email"] == email:
                return u
        return None

    def user_exists(self, email: str) -> bool:
        return self.find_user(email) is not None

    def create_user(self, email: str, password_hash: str, full_name: str = "") -> str:
        """Create a new auth user and return its ID."""
        with self._rw:
            if self.user_exists(email):
                raise ValueError("User already registered")
            return self.insert("users", {
                "email": email.strip().lower(),
                "password_hash": password_hash,
                "user_metadata": {"full_name": full_name},
            })

    # ---------- Profiles ----------
    def upsert_profile(self, user_id: str, values: dict) -> dict:
        """Insert the profile row for ``user_id`` or merge ``values`` into it."""
        with self._rw:
            uid = str(user_id)
            row = self.profiles.get(uid)
            if row is None:
                row = {
                    "id": uid,
                    "full_name": None,
                    "phone": None,
                    "location": None,
                    "date_of_birth": None,
                    "avatar_url": None,
                    "is_verified": False,
                    "created_at": _now_iso(),
                }
                self.profiles[uid] = row
            row.update(values)
            row["updated_at"] = _now_iso()
            self._dump()
            return row

    # ---------- Cars ----------
    def delete_car(self, car_id: str, today: date | None = None) -> bool:
        """Delete a car and every booking of it that has not ended yet."""
        with self._rw:
            cid = str(car_id)
            if cid not in self.cars:
                return False
            today_s = (today or date.today()).isoformat()
            for bid in [b["id"] for b in self.bookings.values()
                        if b.get("car_id") == cid and (b.get("end_date") or "") >= today_s]:
                del self.bookings[bid]
            del self.cars[cid]
            self._dump()
            return True

