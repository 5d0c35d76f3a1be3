"""Import Pokedex entries from a JSON file into a run.

Usage:
    python -m nuzdex.scripts.import_pokedex <user_id> <run_id> <entries.json>

The file holds a list of objects with ``pokemon_id``, ``pokemon_name``,
``status`` and optional ``location``/``notes``. Species already logged in the
run are left untouched.
"""

import asyncio
import json
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nuzdex.core.errors import NuzdexError
from nuzdex.core.pokedex import bulk_add
from nuzdex.database import async_session_factory, close_db, init_db
from nuzdex.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def import_file(
    user_id: str,
    run_id: str,
    path: Path,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> int:
    """Bulk-add the entries in ``path`` and return how many were created."""
    entries = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(entries, list):
        raise ValueError(f"{path} must contain a JSON list")

    async with session_factory() as session:
        result = await bulk_add(session, user_id, run_id, entries)

    logger.info("Pokedex import finished", path=str(path), requested=len(entries), created=result["created"])
    return result["created"]


async def main() -> None:
    """Parse arguments and run the import."""
    setup_logging()

    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(2)

    user_id, run_id, file_arg = sys.argv[1:]
    await init_db()
    try:
        created = await import_file(user_id, run_id, Path(file_arg))
    except NuzdexError as e:
        logger.error("Pokedex import refused", error=e.message)
        sys.exit(1)
    finally:
        await close_db()

    print(f"Created {created} entries.")


if __name__ == "__main__":
    asyncio.run(main())
