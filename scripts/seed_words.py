#!/usr/bin/env python3
"""Validate a word catalog CSV and print a per-lesson report.

CSV schema (header required):
id,english,pos,translation,example,example_translation

Usage:
    python scripts/seed_words.py data/words.csv
"""
from __future__ import annotations

import argparse
from pathlib import Path

from vocabmaster.catalog import CatalogError, load_catalog, total_lessons
from vocabmaster.config import CATALOG_PATH
from vocabmaster.queue import lesson_words


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("csv_path", type=Path, nargs="?", default=CATALOG_PATH, help="Path to words CSV file")
    args = parser.parse_args()

    try:
        catalog = load_catalog(args.csv_path)
    except CatalogError as e:
        raise SystemExit(f"{args.csv_path}: {e}")

    n_lessons = total_lessons(catalog)
    print(f"{len(catalog)} words, {n_lessons} lessons")
    for i in range(n_lessons):
        words = lesson_words(i, catalog)
        missing = sum(1 for w in words if not w.example)
        note = f" ({missing} without example)" if missing else ""
        print(f"Lesson {i + 1}: {', '.join(w.english for w in words)}{note}")


if __name__ == "__main__":
    main()
