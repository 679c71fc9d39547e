"""
Seed the database: the showcase gallery items and the first admin account.

    python -m reeves.seed
"""
import logging

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from .config import settings
from .gallery.showcase import SHOWCASE_ITEMS
from .models.gallery_model import utcnow
from .utils import hash_password

logger = logging.getLogger(__name__)


def ensure_gallery_indexes(collection: Collection) -> None:
    """Indexes backing the filtered, sorted, keyset-paginated listing."""
    for sort_field in ("uploaded_at", "views", "type"):
        collection.create_index([(sort_field, DESCENDING), ("_id", DESCENDING)])
        collection.create_index([("category", ASCENDING), (sort_field, DESCENDING), ("_id", DESCENDING)])
    collection.create_index([("tags", ASCENDING)])


def seed_gallery(collection: Collection) -> int:
    """Insert the showcase items into an empty gallery. Returns how many were added."""
    if collection.count_documents({}, limit=1):
        logger.info("Gallery already has items, skipping showcase seed")
        return 0

    docs = []
    for item in SHOWCASE_ITEMS:
        doc = item.model_dump(mode="json", exclude={"id"})
        doc["uploaded_at"] = utcnow()
        docs.append(doc)
    collection.insert_many(docs)
    logger.info(f"Inserted {len(docs)} showcase gallery items")
    return len(docs)


def seed_admin(collection: Collection, email: str | None, password: str | None) -> bool:
    if not email or not password:
        logger.warning("SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set, no admin created")
        return False
    email = email.lower()
    if collection.find_one({"email": email}):
        logger.info(f"Admin {email} already exists")
        return False

    collection.insert_one({"email": email, "hashed_password": hash_password(password)})
    logger.info(f"Created admin {email}")
    return True


def main() -> None:
    from .db import admins, gallery_collection

    logging.basicConfig(level=settings.LOG_LEVEL)
    ensure_gallery_indexes(gallery_collection)
    seed_gallery(gallery_collection)
    seed_admin(admins, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)
    print("Seed data inserted")


if __name__ == "__main__":
    main()
