"""
Persisted form store.

Two independent slots (hemodynamics form, drip form) holding the last-known
input record as JSON. Loaded once at startup, overwritten on every edit,
removed by "clear all". Corrupt or missing data loads as the empty default.
"""

import json
import logging
from typing import Optional, Union

from sqlalchemy import select, delete
from sqlalchemy.engine import Engine

from constants import STORE_KEYS
from database import FormSlot, create_db_engine, make_session_factory
from models import HemoInputs, DripInputs, UnknownFormError

logger = logging.getLogger(__name__)

FormRecord = Union[HemoInputs, DripInputs]

RECORD_TYPES = {
    STORE_KEYS.HEMO: HemoInputs,
    STORE_KEYS.DRIP: DripInputs,
}


def slot_for_tool(tool: str) -> str:
    """Maps a tool name ('hemo' / 'drip') to its slot key."""
    try:
        return STORE_KEYS.BY_TOOL[tool]
    except KeyError:
        raise UnknownFormError(tool) from None


class FormStore:
    """Key-value slots on top of the form_slots table."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or create_db_engine()
        self._session = make_session_factory(self.engine)

    # --- raw slot access ---

    def _read(self, key: str) -> Optional[str]:
        with self._session() as db:
            slot = db.execute(select(FormSlot).where(FormSlot.key == key)).scalar_one_or_none()
            return slot.value if slot else None

    def _write(self, key: str, value: str) -> None:
        with self._session() as db:
            slot = db.execute(select(FormSlot).where(FormSlot.key == key)).scalar_one_or_none()
            if slot:
                slot.value = value
            else:
                db.add(FormSlot(key=key, value=value))
            db.commit()

    # --- typed records ---

    def load(self, key: str) -> FormRecord:
        """
        Returns the saved record for a slot.
        Missing slot, bad JSON or a non-object payload -> all-absent default.
        """
        if key not in RECORD_TYPES:
            raise UnknownFormError(key)
        record_type = RECORD_TYPES[key]

        raw = self._read(key)
        if raw is None:
            return record_type()
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding corrupt form slot '{key}' (invalid JSON)")
            return record_type()
        if not isinstance(payload, dict):
            logger.warning(f"Discarding corrupt form slot '{key}' (expected object, got {type(payload).__name__})")
            return record_type()
        return record_type.from_form(payload)

    def save(self, key: str, record: FormRecord) -> FormRecord:
        if key not in RECORD_TYPES:
            raise UnknownFormError(key)
        if not isinstance(record, RECORD_TYPES[key]):
            raise TypeError(f"Slot '{key}' holds {RECORD_TYPES[key].__name__}, got {type(record).__name__}")
        self._write(key, json.dumps(record.to_dict()))
        return record

    def load_hemo(self) -> HemoInputs:
        return self.load(STORE_KEYS.HEMO)

    def load_drip(self) -> DripInputs:
        return self.load(STORE_KEYS.DRIP)

    def save_hemo(self, record: HemoInputs) -> HemoInputs:
        return self.save(STORE_KEYS.HEMO, record)

    def save_drip(self, record: DripInputs) -> DripInputs:
        return self.save(STORE_KEYS.DRIP, record)

    def clear(self) -> None:
        """Removes both slots. Next load returns the defaults."""
        with self._session() as db:
            db.execute(delete(FormSlot).where(FormSlot.key.in_(list(RECORD_TYPES))))
            db.commit()
        logger.info("Cleared saved hemodynamics and drip forms")
