"""
Seed the key-value store from a JSON file.

The file holds a list of professor records under "professors" and optionally
a list of users (plaintext passwords, hashed before storing) under "users":

    {
        "professors": [{"id": "p1", "firstName": "Ada", ...}],
        "users": [{"username": "admin", "password": "...", "nickname": "Admin"}]
    }

Every professor is validated and written, then the aggregate professor list
is rebuilt from the same records.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from pydantic import ValidationError  # noqa: E402

from profratings.core.config import get_settings  # noqa: E402
from profratings.core.errors import ProfRatingsError  # noqa: E402
from profratings.core.security import hash_password  # noqa: E402
from profratings.dao.kv_dao import KVDAO  # noqa: E402
from profratings.database.kv import close_redis, create_bindings  # noqa: E402
from profratings.models.schema import Professor, User  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("seed_store")


async def seed(path: Path, skip_invalid: bool = False) -> int:
    """Load professors and users from `path` into the configured store."""
    settings = get_settings()
    if settings.kv_backend == "memory":
        logger.warning("Memory backend selected; seeded data is lost when the script exits")

    data = json.loads(path.read_text(encoding="utf-8"))
    dao = KVDAO(await create_bindings(settings))

    professors = []
    for record in data.get("professors", []):
        try:
            professors.append(Professor.model_validate(record))
        except ValidationError as e:
            if not skip_invalid:
                raise
            logger.warning(f"Skipping invalid professor {record.get('id')}: {e.error_count()} errors")

    try:
        for professor in professors:
            await dao.put_professor(professor)
        written = await dao.put_all_professors(professors)

        for record in data.get("users", []):
            user = User(
                username=record["username"],
                password_hash=hash_password(record["password"]),
                nickname=record.get("nickname"),
            )
            await dao.put_user(user)
            logger.info(f"Stored user {user.username}")
    finally:
        await close_redis()

    return written


def main() -> None:
    """Run the seeding workflow"""
    import argparse

    parser = argparse.ArgumentParser(description="Seed professors and users into the store")
    parser.add_argument("path", type=Path, help="JSON file with professors and users")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip professors that fail validation instead of aborting",
    )
    args = parser.parse_args()

    try:
        written = asyncio.run(seed(args.path, skip_invalid=args.skip_invalid))
    except (ValidationError, ProfRatingsError) as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)

    print(f"Seeded {written} professors")


if __name__ == "__main__":
    main()
