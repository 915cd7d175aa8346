"""Seed script for loading a concept glossary fixture into the database.

Usage:
    python -m app.scripts.seed_concepts [path/to/glossary.json]

Loads concepts, aliases, definition versions and relationships from
fixtures/concept_glossary.json (or the given file) for local development
and demos. Concepts that already exist are skipped.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from app.core.database import async_session_maker, engine
from app.services.concept_store import ConceptStoreService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_SCRIPT_DIR = Path(__file__).parent
_BACKEND_DIR = _SCRIPT_DIR.parent.parent  # app/scripts -> app -> backend root
FIXTURES_DIR = _BACKEND_DIR / "fixtures"
GLOSSARY_FILE = FIXTURES_DIR / "concept_glossary.json"


def load_glossary_fixture(path: Path = GLOSSARY_FILE) -> dict[str, Any]:
    """Load glossary data from a JSON fixture file."""
    if not path.exists():
        raise FileNotFoundError(f"Glossary fixture not found: {path}")

    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return data


async def seed_concepts(path: Path = GLOSSARY_FILE) -> dict[str, int]:
    """Load the glossary into the database in one transaction."""
    payload = load_glossary_fixture(path)
    logger.info(f"Loading {len(payload.get('concepts', []))} concepts from {path}")

    def _load(session: Session) -> dict[str, int]:
        return ConceptStoreService(session).load_fixture(payload)

    async with async_session_maker() as session:
        try:
            counts = await session.run_sync(_load)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    logger.info(
        f"Seeded {counts['concepts']} concepts, {counts['aliases']} aliases, "
        f"{counts['definitions']} definitions, {counts['relationships']} relationships"
    )
    return counts


async def main(argv: list[str] | None = None) -> None:
    """Entry point for running seed script."""
    args = sys.argv[1:] if argv is None else argv
    path = Path(args[0]) if args else GLOSSARY_FILE
    try:
        await seed_concepts(path)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
