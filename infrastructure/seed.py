"""Demo data for local development"""
from decimal import Decimal

from domain.entities import User, Hotel, Room
from domain.enums import UserRole, RoomType
from domain.repositories import UserRepository, HotelRepository, RoomRepository
from infrastructure.logger import get_logger
from infrastructure.security import get_password_hash

logger = get_logger(__name__)

DEMO_PASSWORD = "123123123"

DEMO_HOTELS = [
    {
        "name": "The Grand Luxe Hotel",
        "description": "Five-star comfort in the heart of the city.",
        "address": "1 Grand Avenue",
        "city": "Paris",
        "country": "France",
        "rating": Decimal("4.8"),
        "rooms": [
            ("Classic Double", RoomType.DOUBLE, Decimal("180"), 2),
            ("Executive Suite", RoomType.SUITE, Decimal("420"), 4),
            ("Penthouse", RoomType.PENTHOUSE, Decimal("1200"), 6),
        ],
    },
    {
        "name": "Seaside Retreat",
        "description": "Quiet rooms a short walk from the beach.",
        "address": "22 Ocean Drive",
        "city": "Lisbon",
        "country": "Portugal",
        "rating": Decimal("4.5"),
        "rooms": [
            ("Single Sea View", RoomType.SINGLE, Decimal("95"), 1),
            ("Twin Garden", RoomType.TWIN, Decimal("130"), 2),
        ],
    },
]


async def seed_demo_data(
    users: UserRepository,
    hotels: HotelRepository,
    rooms: RoomRepository
) -> None:
    """Create demo accounts, hotels and rooms unless the owner account exists"""
    if await users.find_by_email("owner@luxstay.com"):
        logger.info("Demo data already present, skipping seed")
        return

    hashed_password = get_password_hash(DEMO_PASSWORD)
    owner = await users.save(User(
        email="owner@luxstay.com", first_name="John", last_name="Smith",
        role=UserRole.HOTEL_OWNER, hashed_password=hashed_password
    ))
    await users.save(User(
        email="client@example.com", first_name="Jane", last_name="Doe",
        role=UserRole.CLIENT, hashed_password=hashed_password
    ))
    await users.save(User(
        email="admin@luxstay.com", first_name="Ada", last_name="Admin",
        role=UserRole.ADMIN, hashed_password=hashed_password
    ))

    room_count = 0
    for data in DEMO_HOTELS:
        hotel = await hotels.save(Hotel(
            owner_id=owner.user_id,
            **{k: v for k, v in data.items() if k != "rooms"}
        ))
        for name, room_type, price, capacity in data["rooms"]:
            await rooms.save(Room(
                hotel_id=hotel.hotel_id,
                name=name,
                room_type=room_type,
                price_per_night=price,
                capacity=capacity,
                amenities=["wifi", "air conditioning"]
            ))
            room_count += 1

    logger.info("Seeded 3 users, %d hotels and %d rooms", len(DEMO_HOTELS), room_count)
