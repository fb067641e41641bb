"""Database-backed key-value repository."""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.models import KeyValueEntryModel


def _normalize_key(key: str) -> str:
    normalized = key.strip()
    if not normalized:
        raise ValueError("Storage key cannot be empty.")
    return normalized


class KeyValueRepository:
    """Persistence helper mirroring the JSON-file store API on top of SQLAlchemy."""

    def get(self, session: Session, key: str) -> Optional[str]:
        model = session.get(KeyValueEntryModel, _normalize_key(key))
        return model.value if model else None

    def set(self, session: Session, key: str, value: str) -> None:
        normalized = _normalize_key(key)
        model = session.get(KeyValueEntryModel, normalized)
        if model is None:
            session.add(KeyValueEntryModel(key=normalized, value=value))
        else:
            model.value = value
        session.flush()

    def remove(self, session: Session, key: str) -> bool:
        result = session.execute(
            delete(KeyValueEntryModel).where(KeyValueEntryModel.key == _normalize_key(key))
        )
        return bool(result.rowcount)

    def items(self, session: Session, prefix: str = "") -> Dict[str, str]:
        stmt = select(KeyValueEntryModel).order_by(KeyValueEntryModel.key)
        if prefix:
            stmt = stmt.where(KeyValueEntryModel.key.startswith(prefix))
        return {model.key: model.value for model in session.execute(stmt).scalars()}


key_values = KeyValueRepository()

__all__ = ["KeyValueRepository", "key_values"]
