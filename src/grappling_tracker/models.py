# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Data-access models.

Each model wraps one table and owns a reference to the shared database
connection. Rows are returned as read-only mappings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from sqlalchemy import text
from sqlalchemy.engine import Connection

from .exceptions import RecordNotFoundError

Row = Mapping[str, Any]

# Primary keys are signed 64-bit integers in every supported backend.
MAX_IDENTIFIER = 2**63 - 1


class Model:
    """Base class for table-backed models."""

    table: ClassVar[str]
    order_by: ClassVar[str] = "id"

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def _quoted(self, identifier: str) -> str:
        return self.connection.dialect.identifier_preparer.quote(identifier)

    def _select(self) -> str:
        return f"SELECT * FROM {self._quoted(self.table)}"

    def _fetch_all(self, sql: str, **params: Any) -> list[Row]:
        return list(self.connection.execute(text(sql), params).mappings().all())

    def all(self) -> list[Row]:
        return self._fetch_all(f"{self._select()} ORDER BY {self._quoted(self.order_by)}")

    def parse_identifier(self, value: int | str) -> int:
        """Convert a path parameter to a key, or raise :class:`RecordNotFoundError`.

        Values that are not integers or fall outside the key range cannot
        name a row.
        """
        try:
            identifier = int(value)
        except ValueError:
            raise RecordNotFoundError(self.table, value) from None
        if not 0 <= identifier <= MAX_IDENTIFIER:
            raise RecordNotFoundError(self.table, identifier)
        return identifier

    def find(self, identifier: int | str) -> Row:
        identifier = self.parse_identifier(identifier)
        row = self.connection.execute(text(f"{self._select()} WHERE id = :id"), {"id": identifier}).mappings().first()
        if row is None:
            raise RecordNotFoundError(self.table, identifier)
        return row

    def count(self) -> int:
        return self.connection.execute(text(f"SELECT COUNT(*) FROM {self._quoted(self.table)}")).scalar_one()

    def where(self, column: str, value: Any) -> list[Row]:
        """Rows whose ``column`` equals ``value``, in default order."""
        return self._fetch_all(
            f"{self._select()} WHERE {self._quoted(column)} = :value ORDER BY {self._quoted(self.order_by)}",
            value=value,
        )


class User(Model):
    table = "users"


class Profile(Model):
    table = "profiles"

    def for_user(self, user_id: int | str) -> Row:
        user_id = self.parse_identifier(user_id)
        rows = self.where("user_id", user_id)
        if not rows:
            raise RecordNotFoundError(self.table, user_id)
        return rows[0]


class TrainingClass(Model):
    table = "training_classes"
    order_by = "held_on"

    def recent(self, limit: int = 5) -> list[Row]:
        return self._fetch_all(
            f"{self._select()} ORDER BY {self._quoted('held_on')} DESC LIMIT :limit",
            limit=limit,
        )


class Position(Model):
    table = "positions"
    order_by = "name"


class Category(Model):
    table = "categories"
    order_by = "name"


class Technique(Model):
    table = "techniques"
    order_by = "name"

    def by_category(self, category_id: int) -> list[Row]:
        return self.where("category_id", category_id)

    def by_position(self, position_id: int) -> list[Row]:
        return self.where("position_id", position_id)

    def for_class(self, training_class_id: int) -> list[Row]:
        return self.where("training_class_id", training_class_id)


class Note(Model):
    table = "notes"

    def latest(self, limit: int = 5) -> list[Row]:
        return self._fetch_all(
            f"{self._select()} ORDER BY {self._quoted('id')} DESC LIMIT :limit",
            limit=limit,
        )


MODELS: Sequence[type[Model]] = (User, Profile, TrainingClass, Position, Category, Technique, Note)

__all__ = [
    "MAX_IDENTIFIER",
    "MODELS",
    "Category",
    "Model",
    "Note",
    "Position",
    "Profile",
    "Row",
    "Technique",
    "TrainingClass",
    "User",
]
