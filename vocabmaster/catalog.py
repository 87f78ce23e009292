from __future__ import annotations

"""Word catalog: CSV loading and lesson counting.

CSV schema (header required):
id,english,pos,translation,example,example_translation
"""

import csv
import math
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Sequence

from vocabmaster.config import CATALOG_PATH, WORDS_PER_LESSON
from vocabmaster.models import Word

REQUIRED_HEADER = ["id", "english", "pos", "translation", "example", "example_translation"]


class CatalogError(ValueError):
    pass


def parse_words_csv(path: Path) -> Iterable[Word]:
    """Yield validated words from the catalog CSV.

    Validates the header, integer ids (unique) and non-empty english/translation.
    """
    seen_ids: set[int] = set()
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []
        if header != REQUIRED_HEADER:
            raise CatalogError(f"Invalid header. Expected {REQUIRED_HEADER}, got {header}")
        for i, row in enumerate(reader, start=2):
            try:
                word_id = int((row.get("id") or "").strip())
            except ValueError:
                raise CatalogError(f"Row {i}: id must be an integer, got {row.get('id')!r}")
            if word_id in seen_ids:
                raise CatalogError(f"Row {i}: duplicate id {word_id}")
            seen_ids.add(word_id)
            english = (row.get("english") or "").strip()
            translation = (row.get("translation") or "").strip()
            if not english or not translation:
                raise CatalogError(f"Row {i}: empty english or translation")
            yield Word(
                id=word_id,
                english=english,
                pos=(row.get("pos") or "").strip(),
                translation=translation,
                example=(row.get("example") or "").strip(),
                example_translation=(row.get("example_translation") or "").strip(),
            )


def load_catalog(path: Path) -> tuple[Word, ...]:
    return tuple(parse_words_csv(path))


def total_lessons(catalog: Sequence[Word]) -> int:
    return math.ceil(len(catalog) / WORDS_PER_LESSON)


@lru_cache(maxsize=1)
def get_catalog() -> tuple[Word, ...]:
    """The bot-wide catalog, loaded once from CATALOG_PATH."""
    return load_catalog(CATALOG_PATH)
