from datetime import datetime, timezone

from ..models.gallery_model import GalleryItem, MediaCategory, MediaType

_UNSPLASH = "https://images.unsplash.com/{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=1000&q=80"

# Shown on the public gallery until the first real item is uploaded
SHOWCASE_ITEMS = [
    GalleryItem(
        id=f"showcase{n}",
        url=_UNSPLASH.format(photo),
        type=MediaType.IMAGE,
        category=category,
        tags=tags,
        title=title,
        description=description,
        uploaded_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    for n, (photo, category, tags, title, description) in enumerate(
        [
            ("photo-1551218808-94e220e084d2", MediaCategory.INTERIOR, ["dining room"],
             "Elegant Dining Room", "Our sophisticated main dining area"),
            ("photo-1414235077428-338989a2e8c0", MediaCategory.FOOD, ["plating"],
             "Culinary Excellence", "Artfully crafted dishes"),
            ("photo-1517248135467-4c7edcad34c4", MediaCategory.INTERIOR, ["ambience"],
             "Intimate Atmosphere", "Perfect for special occasions"),
            ("photo-1559339352-11d035aa65de", MediaCategory.FOOD, ["wine"],
             "Wine Selection", "Curated from around the world"),
            ("photo-1424847651672-bf20a4b0982b", MediaCategory.FOOD, ["chef", "plating"],
             "Chef's Presentation", "Artistry on every plate"),
            ("photo-1555396273-367ea4eb4db5", MediaCategory.EVENTS, ["private dining"],
             "Private Dining", "Exclusive experiences"),
        ],
        start=1,
    )
]
