#!/usr/bin/env python3
"""
Create the database tables.

Usage:
    python scripts/init_db.py                 # uses DATABASE_URL from settings
    python scripts/init_db.py --url sqlite:///./picks.db
"""
import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect

from picks_api.core.config import settings
from picks_api.core.database import build_engine, init_db

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Create the sports picks tables")
    parser.add_argument("--url", default=settings.DATABASE_URL, help="Database URL")
    args = parser.parse_args()

    engine = build_engine(args.url)
    init_db(bind=engine)

    tables = sorted(inspect(engine).get_table_names())
    logger.info(f"{len(tables)} tables present: {', '.join(tables)}")
    engine.dispose()


if __name__ == "__main__":
    main()
