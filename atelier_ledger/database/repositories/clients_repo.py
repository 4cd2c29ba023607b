from __future__ import annotations
from dataclasses import dataclass
import sqlite3

from ..errors import NotFoundError, ValidationError, storage_errors
from ...utils.helpers import clean_text


@dataclass
class Client:
    client_id: int | None
    name: str
    phone: str | None
    notes: str | None


class ClientsRepo:
    """
    Client address book.

    Sales keep the client's name as plain text, so renaming or deleting a
    client never touches recorded sales.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _required_name(name: str | None) -> str:
        name_n = clean_text(name)
        if name_n is None:
            raise ValidationError("Name cannot be empty.")
        return name_n

    # ---- Queries ----------------------------------------------------------

    def list_clients(self, search: str | None = None) -> list[Client]:
        """
        Clients ordered by name. `search` matches name or phone with LIKE.
        """
        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            rows = self.conn.execute(
                "SELECT client_id, name, phone, notes "
                "FROM clients "
                "WHERE name LIKE ? OR phone LIKE ? "
                "ORDER BY name COLLATE NOCASE, client_id",
                (pattern, pattern),
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT client_id, name, phone, notes "
                "FROM clients "
                "ORDER BY name COLLATE NOCASE, client_id"
            ).fetchall()
        return [Client(**dict(r)) for r in rows]

    def get(self, client_id: int) -> Client | None:
        r = self.conn.execute(
            "SELECT client_id, name, phone, notes FROM clients WHERE client_id=?",
            (client_id,),
        ).fetchone()
        return Client(**dict(r)) if r else None

    def find_by_name(self, name: str) -> Client | None:
        """Exact (trimmed) name lookup; the oldest row wins if names repeat."""
        name_n = clean_text(name)
        if name_n is None:
            return None
        r = self.conn.execute(
            "SELECT client_id, name, phone, notes FROM clients "
            "WHERE name = ? ORDER BY client_id LIMIT 1",
            (name_n,),
        ).fetchone()
        return Client(**dict(r)) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(self, name: str, phone: str | None = None, notes: str | None = None) -> int:
        name_n = self._required_name(name)
        with storage_errors("save the client"), self.conn:
            cur = self.conn.execute(
                "INSERT INTO clients(name, phone, notes) VALUES (?,?,?)",
                (name_n, clean_text(phone), clean_text(notes)),
            )
        return int(cur.lastrowid)

    def get_or_create(self, name: str, phone: str | None = None) -> tuple[int, bool]:
        """
        Quick-save used from the sale form: reuse a client with the same name
        instead of adding a duplicate. Returns (client_id, created).
        """
        name_n = self._required_name(name)
        existing = self.find_by_name(name_n)
        if existing is not None:
            return int(existing.client_id), False
        return self.create(name_n, phone), True

    def update(
        self,
        client_id: int,
        name: str,
        phone: str | None = None,
        notes: str | None = None,
    ) -> None:
        name_n = self._required_name(name)
        with storage_errors("update the client"), self.conn:
            cur = self.conn.execute(
                "UPDATE clients SET name=?, phone=?, notes=? WHERE client_id=?",
                (name_n, clean_text(phone), clean_text(notes), client_id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Client {client_id} not found.")

    def delete(self, client_id: int) -> None:
        with storage_errors("delete the client"), self.conn:
            cur = self.conn.execute("DELETE FROM clients WHERE client_id=?", (client_id,))
        if cur.rowcount == 0:
            raise NotFoundError(f"Client {client_id} not found.")
