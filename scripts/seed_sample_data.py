"""Load the sample Mojave map into the configured store.

Usage:
  python scripts/seed_sample_data.py [--publish]

Uses the same environment as the app (WASTELAND_BACKEND, DATABASE_URL).
Does nothing if the store already has locations. With --publish the
sample entities are published immediately.
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wasteland_map.config import load_server_config
from wasteland_map.map_manager import MapManager
from wasteland_map.storage import create_backend, seed_sample_data


def main():
    parser = argparse.ArgumentParser(description="Seed Wasteland Map with sample data")
    parser.add_argument("--publish", action="store_true", help="publish everything after seeding")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")

    config = load_server_config()
    if config.backend == "memory":
        print("The memory backend does not persist; set WASTELAND_BACKEND=sql to seed a database.")
        return 1

    storage = create_backend(config)
    if not seed_sample_data(storage):
        print("Store already has locations; nothing seeded.")
        return 0

    if args.publish:
        state = MapManager(storage).publisher.publish_all_changes()
        print(f"Published at {state.last_published_at.isoformat()}")
    print(f"Seeded sample data into {config.database_url}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
