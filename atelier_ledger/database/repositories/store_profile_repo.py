from __future__ import annotations
from dataclasses import dataclass
import sqlite3

from ..errors import NotFoundError, ValidationError, storage_errors
from ...utils.helpers import clean_text


@dataclass
class StoreProfile:
    profile_id: int | None
    name: str
    contact: str
    notes: str
    logo_uri: str | None


class StoreProfileRepo:
    """
    Store name/contact shown on quotes and reports.

    The table may hold several rows; the latest by id is the current profile.
    `logo_uri` is an opaque reference resolved by whoever renders the logo.
    """

    _SELECT = "SELECT profile_id, name, contact, notes, logo_uri FROM store_profile"

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _validated(name, contact, notes, logo_uri) -> tuple:
        name_n = clean_text(name)
        contact_n = clean_text(contact)
        if name_n is None:
            raise ValidationError("Store name cannot be empty.")
        if contact_n is None:
            raise ValidationError("Store contact cannot be empty.")
        return name_n, contact_n, (notes or "").strip(), clean_text(logo_uri)

    def list_profiles(self) -> list[StoreProfile]:
        rows = self.conn.execute(self._SELECT + " ORDER BY profile_id DESC").fetchall()
        return [StoreProfile(**dict(r)) for r in rows]

    def get(self, profile_id: int) -> StoreProfile | None:
        r = self.conn.execute(self._SELECT + " WHERE profile_id = ?", (profile_id,)).fetchone()
        return StoreProfile(**dict(r)) if r else None

    def get_current(self) -> StoreProfile | None:
        r = self.conn.execute(self._SELECT + " ORDER BY profile_id DESC LIMIT 1").fetchone()
        return StoreProfile(**dict(r)) if r else None

    def create(self, name: str, contact: str, notes: str = "", logo_uri: str | None = None) -> int:
        vals = self._validated(name, contact, notes, logo_uri)
        with storage_errors("save the store profile"), self.conn:
            cur = self.conn.execute(
                "INSERT INTO store_profile(name, contact, notes, logo_uri) VALUES (?,?,?,?)",
                vals,
            )
        return int(cur.lastrowid)

    def update(
        self,
        profile_id: int,
        name: str,
        contact: str,
        notes: str = "",
        logo_uri: str | None = None,
    ) -> None:
        vals = self._validated(name, contact, notes, logo_uri)
        with storage_errors("update the store profile"), self.conn:
            cur = self.conn.execute(
                "UPDATE store_profile SET name=?, contact=?, notes=?, logo_uri=? WHERE profile_id=?",
                (*vals, profile_id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Store profile {profile_id} not found.")

    def save(self, name: str, contact: str, notes: str = "", logo_uri: str | None = None) -> int:
        """Update the current profile, or create the first one. Returns its id."""
        current = self.get_current()
        if current is None:
            return self.create(name, contact, notes, logo_uri)
        self.update(int(current.profile_id), name, contact, notes, logo_uri)
        return int(current.profile_id)

    def delete(self, profile_id: int) -> None:
        with storage_errors("delete the store profile"), self.conn:
            cur = self.conn.execute("DELETE FROM store_profile WHERE profile_id = ?", (profile_id,))
        if cur.rowcount == 0:
            raise NotFoundError(f"Store profile {profile_id} not found.")
