#!/usr/bin/env python3
"""Command to load annonce documents from a JSON file (local fixtures)"""

import sys
import json
import argparse
import logging
from typing import Any, Dict, List

from apps.core.config import settings
from apps.core.db import SessionLocal, session_scope
from apps.annonces.services.repository import SqlListingRepository

logger = logging.getLogger(__name__)

STEP_KEYS = [f"step{i}" for i in range(6)]


def seed_annonces(documents: List[Dict[str, Any]], session_factory=SessionLocal) -> int:
    """Replay each document's steps through save_step, step 5 last.

    Returns the number of annonces written.
    """
    written = 0
    with session_scope(session_factory) as db:
        repository = SqlListingRepository(db)
        for document in documents:
            annonce_id = document.get("annonceId") or document.get("id")
            member_id = document.get("memberId")
            steps = [(i, key) for i, key in enumerate(STEP_KEYS) if isinstance(document.get(key), dict)]
            if not steps:
                logger.warning("Skipping document without steps: %s", annonce_id)
                continue
            for index, key in steps:
                annonce_id = repository.save_step(
                    step_index=index,
                    data=document[key],
                    annonce_id=annonce_id,
                    member_id=member_id,
                )
            written += 1
            logger.info("Seeded annonce %s (%d steps)", annonce_id, len(steps))
    return written


def main():
    """Main function"""
    parser = argparse.ArgumentParser(description="Load annonce documents into the listing store")
    parser.add_argument("path", help="JSON file holding a list of annonce documents")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        with open(args.path, "r", encoding="utf-8") as fh:
            documents = json.load(fh)
        if not isinstance(documents, list):
            raise ValueError("expected a JSON array of annonce documents")
        count = seed_annonces(documents)
        print(f"✅ Seeded {count} annonces")
    except Exception as e:
        print(f"❌ Error seeding annonces: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
