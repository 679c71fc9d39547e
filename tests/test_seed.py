from unittest.mock import MagicMock

from reeves.gallery.showcase import SHOWCASE_ITEMS
from reeves.seed import ensure_gallery_indexes, seed_admin, seed_gallery
from reeves.utils import verify_password


def test_seed_gallery_inserts_showcase_into_empty_collection():
    collection = MagicMock()
    collection.count_documents.return_value = 0

    added = seed_gallery(collection)

    docs = collection.insert_many.call_args.args[0]
    assert added == len(SHOWCASE_ITEMS)
    assert {doc["category"] for doc in docs} <= {"food", "interior", "events", "behind_scenes", "staff"}
    assert all("id" not in doc and doc["views"] == 0 for doc in docs)


def test_seed_gallery_leaves_existing_items_alone():
    collection = MagicMock()
    collection.count_documents.return_value = 1

    assert seed_gallery(collection) == 0
    collection.insert_many.assert_not_called()


def test_seed_admin_hashes_password():
    collection = MagicMock()
    collection.find_one.return_value = None

    assert seed_admin(collection, "Owner@ReevesDining.com", "s3cret") is True

    doc = collection.insert_one.call_args.args[0]
    assert doc["email"] == "owner@reevesdining.com"
    assert verify_password("s3cret", doc["hashed_password"])


def test_seed_admin_skips_existing_or_unconfigured():
    collection = MagicMock()
    collection.find_one.return_value = {"email": "owner@reevesdining.com"}

    assert seed_admin(collection, "owner@reevesdining.com", "s3cret") is False
    assert seed_admin(collection, None, None) is False
    collection.insert_one.assert_not_called()


def test_indexes_cover_every_sort_order():
    collection = MagicMock()

    ensure_gallery_indexes(collection)

    keys = [call.args[0] for call in collection.create_index.call_args_list]
    assert [("views", -1), ("_id", -1)] in keys
    assert [("category", 1), ("uploaded_at", -1), ("_id", -1)] in keys
    assert [("tags", 1)] in keys
