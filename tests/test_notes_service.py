import json

from repositories.storage import InMemoryStorage
from services.notes_service import NOTES_KEYS, NotesService


def test_set_and_get_note():
    storage = InMemoryStorage()
    notes = NotesService(storage, NOTES_KEYS["plans"])
    notes.set(2026, "  Renewed health cover  ")
    assert notes.get(2026) == "Renewed health cover"
    assert json.loads(storage.get("insurance_notes")) == {"2026": "Renewed health cover"}


def test_blank_note_deletes():
    notes = NotesService(InMemoryStorage(), "lifexp_notes")
    notes.set(2025, "Bought the car")
    notes.set(2026, "Trip")
    notes.set(2025, "   ")
    assert notes.all() == {"2026": "Trip"}
    assert notes.get(2025) == ""


def test_malformed_notes_read_as_empty():
    notes = NotesService(InMemoryStorage({"accounts_notes": "[1, 2"}), "accounts_notes")
    assert notes.all() == {}
    notes.set(2026, "fresh start")
    assert notes.get(2026) == "fresh start"
