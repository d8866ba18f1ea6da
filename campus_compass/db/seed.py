"""
Seed universities and a handful of sample events.

    python -m campus_compass.db.seed

Existing rows (matched by id) are left untouched, so the script can be
re-run safely.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.core.logging import setup_logging, get_logger
from campus_compass.db.session import AsyncSessionLocal, engine
from campus_compass.models.event import Event, EventCategory
from campus_compass.models.university import University

logger = get_logger(__name__)

UNIVERSITIES = [
    {"id": "ucla", "name": "University of California, Los Angeles", "tz": "America/Los_Angeles",
     "center_lat": 34.0689, "center_lng": -118.4452},
    {"id": "berkeley", "name": "University of California, Berkeley", "tz": "America/Los_Angeles",
     "center_lat": 37.8719, "center_lng": -122.2585},
    {"id": "sfsu", "name": "San Francisco State University", "tz": "America/Los_Angeles",
     "center_lat": 37.7238, "center_lng": -122.4782},
    {"id": "sjsu", "name": "San José State University", "tz": "America/Los_Angeles",
     "center_lat": 37.3352, "center_lng": -121.8811},
]

# (id, university, title, description, starts in, lasts, location, lat, lng, categories, popularity)
SAMPLE_EVENTS = [
    ("event-1", "ucla", "Computer Science Career Fair",
     "Meet top tech companies and explore internship opportunities",
     timedelta(days=2), timedelta(hours=4), "Pauley Pavilion", 34.0720, -118.4441,
     ["Career", "Technology", "Networking"], 85),
    ("event-2", "ucla", "Free Pizza Night - Engineering Society",
     "Free pizza and networking with fellow engineering students",
     timedelta(hours=6), timedelta(hours=2), "Engineering VI Building", 34.0685, -118.4437,
     ["Free Food", "Engineering", "Social"], 92),
    ("event-3", "ucla", "UCLA Basketball vs USC",
     "Cheer on the Bruins in this rivalry game! Student tickets available.",
     timedelta(days=3), timedelta(hours=2), "Pauley Pavilion", 34.0720, -118.4441,
     ["Sports", "Basketball", "School Spirit"], 78),
    ("event-4", "ucla", "Study Abroad Information Session",
     "Learn about study abroad opportunities and application processes",
     timedelta(days=1), timedelta(minutes=90), "Royce Hall", 34.0722, -118.4427,
     ["Academic", "International", "Information"], 45),
    ("event-5", "ucla", "Greek Life Rush Week Kickoff",
     "Meet representatives from all fraternities and sororities on campus",
     timedelta(hours=4), timedelta(hours=3), "Bruin Plaza", 34.0709, -118.4423,
     ["Greek Life", "Social", "Recruitment"], 67),
    ("event-6", "ucla", "Meditation and Mindfulness Workshop",
     "Stress-reduction techniques for college life",
     timedelta(hours=18), timedelta(hours=1), "Wooden Center", 34.0707, -118.4448,
     ["Wellness", "Mental Health", "Workshop"], 38),
    ("berkeley-event-1", "berkeley", "EECS Career Fair",
     "Connect with tech companies hiring in electrical engineering and computer science",
     timedelta(hours=36), timedelta(hours=5), "Memorial Stadium", 37.8713, -122.2505,
     ["Career", "Technology", "Engineering"], 90),
    ("berkeley-event-2", "berkeley", "Free Burritos - Engineering Student Society",
     "Free burritos and networking with fellow engineering students",
     timedelta(hours=8), timedelta(hours=2), "Soda Hall", 37.8758, -122.2589,
     ["Free Food", "Engineering", "Social"], 88),
]


async def seed(db: AsyncSession) -> tuple[int, int]:
    now = datetime.now(timezone.utc)
    universities_created = 0
    events_created = 0

    for data in UNIVERSITIES:
        if await db.get(University, data["id"]) is None:
            db.add(University(**data))
            universities_created += 1
    await db.flush()

    for (event_id, university_id, title, description, starts_in, lasts, location,
         lat, lng, categories, popularity) in SAMPLE_EVENTS:
        if await db.get(Event, event_id) is not None:
            continue
        start = now + starts_in
        db.add(Event(
            id=event_id,
            university_id=university_id,
            title=title,
            description=description,
            start=start,
            end=start + lasts,
            location=location,
            coords_lat=lat,
            coords_lng=lng,
            popularity=popularity,
            dedupe_key=f"{event_id}-{location.lower().replace(' ', '-')}",
            source_ids=[],
            category_links=[EventCategory(name=name) for name in categories],
        ))
        events_created += 1

    await db.flush()
    return universities_created, events_created


async def main() -> None:
    setup_logging()
    async with AsyncSessionLocal() as db:
        universities_created, events_created = await seed(db)
        await db.commit()
    await engine.dispose()
    logger.info("seed_completed", universities=universities_created, events=events_created)


if __name__ == "__main__":
    asyncio.run(main())
