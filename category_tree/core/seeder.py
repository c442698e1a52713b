"""Seed the shared category tree on first startup.

Loads a JSON fixture of public categories into an empty table so anonymous
visitors see a starter tree. Idempotent: skips if any category exists.
"""

import json
import logging
from pathlib import Path

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_FIXTURE_PATH = Path(__file__).parent.parent / "fixtures" / "seed_categories.json"


def seed_shared_categories(db: Session, fixture_path: Path = _FIXTURE_PATH) -> int:
    """Insert the shared fixture tree if the table is empty.

    Returns:
        Number of categories seeded (0 if skipped).
    """
    from ..ordering.allocator import append_key
    from ..ordering.paths import compute_path
    from ..repositories.category_repository import CategoryRepository

    repo = CategoryRepository(db)
    existing = repo.count()
    if existing > 0:
        logger.debug("Database has %d categories, skipping seed", existing)
        return 0

    if not fixture_path.exists():
        logger.debug("No seed fixture at %s", fixture_path)
        return 0

    try:
        with open(fixture_path, encoding="utf-8") as f:
            fixture = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read seed fixture: %s", e)
        return 0

    seeded = 0
    # (parent, entries) pairs; parent None = root level
    pending = [(None, fixture.get("categories", []))]
    while pending:
        parent, entries = pending.pop()
        keys = []
        for entry in entries:
            key = append_key(keys)
            keys.append(key)
            category = repo.insert(
                None,
                entry["name"],
                entry.get("description"),
                parent.id if parent else None,
                key,
                path=compute_path(parent),
                extra=entry.get("metadata"),
            )
            seeded += 1
            if entry.get("children"):
                pending.append((category, entry["children"]))

    logger.info("Seeded %d shared categories from fixture", seeded)
    return seeded
