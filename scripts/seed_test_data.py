"""
Seed script to populate the database with users, listings and message
histories for local development of the inbox.
Run with: python scripts/seed_test_data.py
"""

import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

# Add parent directory to path so we can import inbox
sys.path.insert(0, str(Path(__file__).parent.parent))

from faker import Faker
from sqlalchemy import func, select

from inbox.core.security import create_access_token
from inbox.database import async_session_maker
from inbox.models.listing import Listing
from inbox.models.message import Message
from inbox.models.user import User

fake = Faker()

# Configuration
NUM_USERS = 60
NUM_LISTINGS = 120
NUM_CONVERSATIONS = 400
MAX_MESSAGES_PER_CONVERSATION = 40
EMAIL_DOMAIN = "test.inbox.local"


async def seed_users(db) -> list[User]:
    """Create test users, some without an avatar."""
    users = []

    print(f"Creating {NUM_USERS} test users...")

    for i in range(NUM_USERS):
        user = User(
            id=uuid4(),
            email=f"user{i+1}@{EMAIL_DOMAIN}",
            full_name=fake.name(),
            avatar_url=fake.image_url() if random.random() < 0.7 else None,
            created_at=datetime.now(timezone.utc) - timedelta(days=random.randint(30, 365)),
        )
        db.add(user)
        users.append(user)

    await db.flush()
    print(f"  Created {len(users)} users")
    return users


async def seed_listings(db, users: list[User]) -> list[Listing]:
    """Create listings owned by random sellers."""
    listings = []

    print(f"Creating {NUM_LISTINGS} listings...")

    for _ in range(NUM_LISTINGS):
        listing = Listing(
            id=uuid4(),
            seller_id=random.choice(users).id,
            title=fake.catch_phrase()[:255],
            created_at=datetime.now(timezone.utc) - timedelta(days=random.randint(1, 90)),
        )
        db.add(listing)
        listings.append(listing)

    await db.flush()
    print(f"  Created {len(listings)} listings")
    return listings


async def seed_messages(db, users: list[User], listings: list[Listing]) -> list[Message]:
    """
    Create message histories between random pairs.

    Message counts per pair are skewed on purpose: most pairs exchange a
    handful of messages, a few exchange dozens.
    """
    messages = []
    pairs: set[tuple] = set()

    print(f"Creating up to {NUM_CONVERSATIONS} conversations...")

    for _ in range(NUM_CONVERSATIONS):
        user_a, user_b = random.sample(users, 2)
        pair = tuple(sorted((user_a.id, user_b.id)))
        if pair in pairs:
            continue
        pairs.add(pair)

        seller_listings = [item for item in listings if item.seller_id in (user_a.id, user_b.id)]
        listing = random.choice(seller_listings) if seller_listings and random.random() < 0.6 else None

        count = min(int(random.paretovariate(1.2)), MAX_MESSAGES_PER_CONVERSATION)
        sent_at = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 60))

        for _ in range(count):
            sender, recipient = random.choice([(user_a, user_b), (user_b, user_a)])
            sent_at += timedelta(minutes=random.randint(1, 600))
            message = Message(
                id=uuid4(),
                sender_id=sender.id,
                recipient_id=recipient.id,
                content=fake.sentence(nb_words=random.randint(3, 18)),
                listing_id=listing.id if listing else None,
                is_read_by_recipient=random.random() < 0.7,
                is_deleted=random.random() < 0.05,
                created_at=sent_at,
            )
            db.add(message)
            messages.append(message)

    await db.flush()
    print(f"  Created {len(messages)} messages in {len(pairs)} conversations")
    return messages


async def main():
    print("=" * 50)
    print("Seeding inbox test data")
    print("=" * 50)

    async with async_session_maker() as db:
        try:
            count_result = await db.execute(
                select(func.count(User.id)).where(User.email.like(f"%@{EMAIL_DOMAIN}"))
            )
            existing_count = count_result.scalar() or 0

            if existing_count > 0:
                print(f"\nFound {existing_count} existing test users.")
                response = input("Do you want to add more test data? (y/n): ")
                if response.lower() != 'y':
                    print("Aborted.")
                    return

            print("\nCreating test data...")

            users = await seed_users(db)
            listings = await seed_listings(db, users)
            messages = await seed_messages(db, users, listings)

            await db.commit()

            print("\n" + "=" * 50)
            print("Summary:")
            print("=" * 50)
            print(f"  Users created: {len(users)}")
            print(f"  Listings created: {len(listings)}")
            print(f"  Messages created: {len(messages)}")
            print(f"    - Unread: {len([m for m in messages if not m.is_read_by_recipient])}")
            print(f"    - Deleted: {len([m for m in messages if m.is_deleted])}")
            print("\nBearer token for the first test user:")
            print(f"  {users[0].email}")
            print(f"  {create_access_token(str(users[0].id))}")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"\nError: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
