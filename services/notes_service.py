"""
services/notes_service.py
-------------------------
Free-text notes per calendar year, one map per section of the app.
"""

from repositories.storage import StoragePort, load_json, save_json
from utils.logger import get_logger

logger = get_logger(__name__)

NOTES_KEYS = {
    "lifexp": "lifexp_notes",
    "plans": "insurance_notes",
    "accounts": "accounts_notes",
}


class NotesService:
    """
    Stores ``{year: text}`` under one storage key.

    Args:
        storage: Local storage.
        key: Storage key, one of NOTES_KEYS' values.
    """

    def __init__(self, storage: StoragePort, key: str):
        self.storage = storage
        self.key = key

    def all(self) -> dict[str, str]:
        notes = load_json(self.storage, self.key, dict, {})
        return {str(year): text for year, text in notes.items() if isinstance(text, str)}

    def get(self, year: int) -> str:
        return self.all().get(str(year), "")

    def set(self, year: int, text: str) -> None:
        """Save the note for a year; blank text deletes it."""
        notes = self.all()
        text = text.strip()
        if text:
            notes[str(year)] = text
        else:
            notes.pop(str(year), None)
        save_json(self.storage, self.key, notes)
        logger.info(f"Note for {year} {'saved' if text else 'cleared'} under '{self.key}'")
