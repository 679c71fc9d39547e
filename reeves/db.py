from pymongo import MongoClient
from .config import settings

# MongoClient connects lazily on first operation
client = MongoClient(settings.MONGO_URI, tz_aware=True)

db = client[settings.MONGO_DB_NAME]
gallery_collection = db["gallery"]
menu_collection = db["menu_items"]
admins = db["admins"]
reservations_collection = db["reservations"]
contacts_collection = db["contacts"]


def get_gallery_store():
    from .gallery.store import MongoGalleryStore
    return MongoGalleryStore(gallery_collection)


def get_menu_store():
    from .services.menu_store import MenuStore
    return MenuStore(menu_collection)


def get_reservation_store():
    from .models.reservation_model import Reservation, ReservationStatus
    from .services.record_store import RecordStore
    return RecordStore(reservations_collection, Reservation, ReservationStatus.PENDING.value)


def get_contact_store():
    from .models.contact_model import ContactMessage, ContactStatus
    from .services.record_store import RecordStore
    return RecordStore(contacts_collection, ContactMessage, ContactStatus.UNREAD.value)


def get_admin_collection():
    return admins
