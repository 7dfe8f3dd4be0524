"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 sample users (password: ``password123``)
  - 4 sample rides (three active, one completed)
  - passengers on two of the rides
  - a short chat on the first ride
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import func, select

from carpool.api.security import hash_password
from carpool.config import settings
from carpool.domain.enums import Gender, GenderPreference, RideStatus
from carpool.infrastructure.database import Database
from carpool.infrastructure.models import (
    MessageModel,
    RideModel,
    RidePassengerModel,
    UserModel,
)

PASSWORD = "password123"

USERS = [
    {"name": "Aarav Sharma", "email": "aarav@example.com", "gender": Gender.MALE, "phone": "9800000001", "rating": 4.8},
    {"name": "Priya Patel", "email": "priya@example.com", "gender": Gender.FEMALE, "phone": "9800000002", "rating": 4.9},
    {"name": "Rohan Mehta", "email": "rohan@example.com", "gender": Gender.MALE, "phone": "9800000003", "rating": 4.5},
    {"name": "Sneha Gupta", "email": "sneha@example.com", "gender": Gender.FEMALE, "phone": "9800000004", "rating": 4.7},
    {"name": "Kiran Rao", "email": "kiran@example.com", "gender": Gender.OTHER, "phone": "9800000005", "rating": 4.6},
    {"name": "Meera Nair", "email": "meera@example.com", "gender": Gender.FEMALE, "phone": "9800000006", "rating": 4.8},
]


async def seed(database: Database):
    async with database.session() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(UserModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        hashed = hash_password(PASSWORD)
        users = []
        for u in USERS:
            m = UserModel(password_hash=hashed, **u)
            session.add(m)
            users.append(m)
        await session.flush()
        print(f"  Created {len(users)} users")

        # ── Rides ─────────────────────────────────────────────────────
        today = date.today()
        rides_data = [
            {
                "driver": users[0], "destination": "Airport Terminal 2",
                "start_location": "Andheri West", "date": today + timedelta(days=1),
                "time": "07:30", "total_seats": 3, "cost_per_person": 150.0,
                "passengers": [users[1], users[2]],
                "vehicle_info": {"make": "Maruti", "model": "Swift", "color": "White", "license_plate": "MH02AB1234"},
            },
            {
                "driver": users[1], "destination": "Pune Station",
                "start_location": "Powai", "date": today + timedelta(days=2),
                "time": "18:00", "total_seats": 4, "cost_per_person": 450.0,
                "gender_preference": GenderPreference.FEMALE,
                "passengers": [users[3]],
            },
            {
                "driver": users[4], "destination": "Bandra Kurla Complex",
                "start_location": "Thane", "date": today + timedelta(days=1),
                "time": "09:00", "total_seats": 2, "cost_per_person": 90.0,
                "passengers": [],
            },
            {
                "driver": users[2], "destination": "Lonavala",
                "start_location": "Dadar", "date": today - timedelta(days=3),
                "time": "06:00", "total_seats": 4, "cost_per_person": 300.0,
                "status": RideStatus.COMPLETED, "passengers": [],
            },
        ]

        rides = []
        for r in rides_data:
            passengers = r.pop("passengers")
            driver = r.pop("driver")
            ride = RideModel(
                driver_id=driver.id,
                available_seats=r["total_seats"] - len(passengers),
                **r,
            )
            session.add(ride)
            await session.flush()
            for p in passengers:
                session.add(RidePassengerModel(ride_id=ride.id, user_id=p.id))
            rides.append(ride)
        await session.flush()
        print(f"  Created {len(rides)} rides")

        # ── Chat ──────────────────────────────────────────────────────
        for sender, text in [
            (users[0], "Pickup at the Andheri station east exit."),
            (users[1], "Thanks! I'll be there 5 minutes early."),
            (users[2], "Running a little late, please wait 2 minutes."),
        ]:
            session.add(MessageModel(ride_id=rides[0].id, sender_id=sender.id, message=text))
        await session.flush()
        print("  Created 3 messages")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    database = Database.from_url(settings.database_url)
    await seed(database)
    await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
