"""
Word Store - Units (word lists) and their words.

The practice core only reads from the store. Writes happen when a user
uploads a CSV file: each row is "answer,prompt"; cells are trimmed and
the first letter of each side is upper-cased. Rows with fewer than two
columns or an empty cell are skipped.
"""

from __future__ import annotations
from dataclasses import dataclass
import csv
import io
import itertools
import logging
import threading
import time
from pathlib import Path

from ..engine_core.state import Word
from ..engine_core.answers import display_answer
from ..errors import UnitNotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unit:
    """A named word list owned by one user."""
    unit_id: int
    owner: str
    name: str
    created_at: float = 0.0


def parse_word_rows(content: str) -> list[tuple[str, str]]:
    """
    Parse CSV text into (target, source) pairs.

    Blank lines and short rows are skipped.
    """
    pairs = []
    for row in csv.reader(io.StringIO(content)):
        if len(row) < 2:
            continue
        target = display_answer(row[0].strip())
        source = display_answer(row[1].strip())
        if not target or not source:
            continue
        pairs.append((target, source))
    return pairs


class InMemoryWordStore:
    """
    Thread-safe in-memory word store.

    Ids are allocated from process-wide counters, like the
    autoincrement columns of a table.
    """

    def __init__(self):
        self._units: dict[int, Unit] = {}
        self._words: dict[int, list[Word]] = {}
        self._unit_ids = itertools.count(1)
        self._word_ids = itertools.count(1)
        self._lock = threading.Lock()

    def add_unit(self, owner: str, name: str, pairs: list[tuple[str, str]]) -> Unit:
        """Create a unit from (target, source) pairs."""
        with self._lock:
            unit = Unit(
                unit_id=next(self._unit_ids),
                owner=owner,
                name=name,
                created_at=time.time(),
            )
            self._units[unit.unit_id] = unit
            self._words[unit.unit_id] = [
                Word(
                    word_id=next(self._word_ids),
                    source_text=source,
                    target_text=target,
                    list_id=unit.unit_id,
                )
                for target, source in pairs
            ]
        logger.info("Unit %s created for %s with %d words", unit.unit_id, owner, len(pairs))
        return unit

    def import_csv(self, owner: str, name: str, content: str) -> Unit:
        """
        Create a unit from uploaded CSV text.

        Raises ValidationError if no row is usable.
        """
        pairs = parse_word_rows(content)
        if not pairs:
            raise ValidationError("Empty or invalid file")
        return self.add_unit(owner, name, pairs)

    def list_units(self, owner: str) -> list[Unit]:
        """Owner's units, newest first."""
        with self._lock:
            units = [u for u in self._units.values() if u.owner == owner]
        return sorted(units, key=lambda u: (u.created_at, u.unit_id), reverse=True)

    def get_unit(self, owner: str, unit_id: int) -> tuple[Unit, list[Word]]:
        """Get a unit and its words. Raises UnitNotFoundError if not owned."""
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None or unit.owner != owner:
                raise UnitNotFoundError("Unit not found", details={"unit_id": unit_id})
            return unit, list(self._words.get(unit_id, []))

    def words_for_units(self, owner: str, unit_ids: list[int]) -> list[Word]:
        """Union of words from the given units, skipping units not owned."""
        words = []
        with self._lock:
            for unit_id in dict.fromkeys(unit_ids):
                unit = self._units.get(unit_id)
                if unit is None or unit.owner != owner:
                    continue
                words.extend(self._words.get(unit_id, []))
        return words

    def delete_unit(self, owner: str, unit_id: int):
        """Delete a unit and its words. Raises UnitNotFoundError if not owned."""
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None or unit.owner != owner:
                raise UnitNotFoundError("Unit not found", details={"unit_id": unit_id})
            del self._units[unit_id]
            self._words.pop(unit_id, None)
        logger.info("Unit %s deleted for %s", unit_id, owner)


def load_directory(store: InMemoryWordStore, root: str | Path) -> list[Unit]:
    """
    Import every CSV under root/<owner>/<unit name>.csv.

    Files without usable rows are skipped with a warning.
    """
    units = []
    root = Path(root)
    for path in sorted(root.glob("*/*.csv")):
        owner = path.parent.name
        try:
            content = path.read_text(encoding="utf-8-sig")
            units.append(store.import_csv(owner, path.stem, content))
        except ValidationError:
            logger.warning("Skipping %s: no usable rows", path)
    return units
