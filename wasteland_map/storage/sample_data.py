"""
Sample map content for demos and fresh installs.

Seeds three Mojave locations, two Strip vendors and the Goodsprings road.
Works against any MapStorage backend.
"""

import logging

from wasteland_map.models import LocationInput, RoadInput, VendorInput
from wasteland_map.storage.protocol import MapStorage

logger = logging.getLogger(__name__)

SAMPLE_LOCATIONS = {
    "vegas-strip": LocationInput(
        name="New Vegas Strip",
        type="settlement",
        description=(
            "The heart of New Vegas, featuring luxury casinos, high-end shops, and the "
            "exclusive Ultra-Luxe. Home to Mr. House and his Securitron army. Safe zone "
            "with 24/7 security patrols."
        ),
        x=45, y=30, icon="city", safety_rating=5, is_published=True,
    ),
    "goodsprings": LocationInput(
        name="Goodsprings",
        type="settlement",
        description=(
            "A small frontier town known for its saloon and friendly residents. "
            "Starting point for many wasteland adventures."
        ),
        x=25, y=60, icon="home", safety_rating=4, is_published=True,
    ),
    "deathclaw-quarry": LocationInput(
        name="Deathclaw Quarry",
        type="dungeon",
        description="An extremely dangerous quarry infested with deathclaws. High-level area with valuable loot.",
        x=65, y=15, icon="skull-crossbones", safety_rating=1, is_published=True,
    ),
}

SAMPLE_VENDORS = {
    "vegas-strip": [
        VendorInput(
            name="The Tops Casino",
            description="Games, drinks, and entertainment. Chip exchange available.",
            hours="24/7",
            services=["Gambling", "Food & Drink"],
        ),
        VendorInput(
            name="Ultra-Luxe",
            description="Exclusive casino and restaurant. High-class dining and accommodations.",
            hours="Members Only",
            services=["Luxury", "Fine Dining"],
        ),
    ],
}

SAMPLE_ROADS = [
    RoadInput(
        from_location_id="goodsprings",
        to_location_id="vegas-strip",
        path_data="M 25% 60% Q 35% 45% 45% 30%",
        is_published=True,
    ),
]


def seed_sample_data(storage: MapStorage) -> bool:
    """
    Load the sample map into an empty store.

    Returns:
        True if data was written, False if the store already had locations.
    """
    if storage.get_locations():
        logger.info("Store already has locations, skipping sample data")
        return False

    for location_id, data in SAMPLE_LOCATIONS.items():
        storage.create_location(data, location_id=location_id)
    for location_id, vendors in SAMPLE_VENDORS.items():
        storage.replace_vendors(location_id, vendors)
    for road in SAMPLE_ROADS:
        storage.create_road(road)

    logger.info(f"Seeded {len(SAMPLE_LOCATIONS)} sample locations into {storage.backend_type} store")
    return True
