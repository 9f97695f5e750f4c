import json
import logging
import random
import uuid
from typing import Any

from sqlalchemy import text

from deeplove.auth.security import hash_password

logger = logging.getLogger(__name__)

FEMALE_NAMES = ["Emma", "Olivia", "Ava", "Isabella", "Sophia", "Mia", "Charlotte", "Amelia", "Harper", "Evelyn", "Abigail", "Emily", "Sofia", "Ella", "Grace"]
MALE_NAMES = ["Liam", "Noah", "William", "James", "Oliver", "Benjamin", "Elijah", "Lucas", "Mason", "Logan", "Ethan", "Jacob", "Daniel", "Henry", "Matthew"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Martinez", "Lopez", "Wilson", "Anderson", "Taylor", "Moore", "Martin"]
OCCUPATIONS = ["Teacher", "Software Developer", "Nurse", "Marketing Specialist", "Graphic Designer", "Doctor", "Chef", "Architect", "Photographer", "Writer", "Lawyer", "Accountant", "Engineer", "Artist", "Personal Trainer"]
HOBBIES = ["hiking", "yoga", "reading", "cooking", "travel", "photography", "painting", "music", "dancing", "running", "cycling", "swimming", "gardening", "meditation", "theater", "movies", "baking", "podcasts", "writing", "camping", "coffee", "board games", "languages", "volunteering"]
RELATIONSHIP_GOALS = ["casual", "longTerm", "marriage", "friendship"]
RELIGIONS = ["none", "christianity", "islam", "judaism", "hinduism", "buddhism", "spiritual", "other"]
ETHNICITIES = ["asian", "black", "hispanic", "white", "mixed", "other"]

# Deleted in this order on reset; seeded ids carry the "seed-" prefix.
SEED_OWNED_TABLES = [
    ("swipe_quota", "user_id"),
    ("entitlement", "user_id"),
    ("criteria", "user_id"),
    ("profiles", "id"),
    ("users", "id"),
]

BIO_INTROS = [
    "Working as a {occupation} has taught me to appreciate the little things.",
    "I love my job as a {occupation}, but there's so much more to me.",
    "{occupation} by day, adventure seeker by night.",
]
BIO_HOBBIES = [
    "I'm passionate about {a} and {b}.",
    "In my free time, I enjoy {a}, {b}.",
    "My perfect weekend involves {a} and lots of {b}.",
]
BIO_CLOSERS = [
    "Looking for someone who shares my enthusiasm for life.",
    "Hoping to meet someone authentic and kind.",
    "Let's see if we click!",
]


def _bio(rng: random.Random, occupation: str, interests: list[str]) -> str:
    a = interests[0]
    b = interests[1] if len(interests) > 1 else interests[0]
    return " ".join(
        [
            rng.choice(BIO_INTROS).format(occupation=occupation),
            rng.choice(BIO_HOBBIES).format(a=a, b=b),
            rng.choice(BIO_CLOSERS),
        ]
    )


def _photo_url(gender: str, index: int) -> str:
    folder = "women" if gender == "female" else "men"
    return f"https://randomuser.me/api/portraits/{folder}/{(index % 70) + 1}.jpg"


def generate_fake_profile(rng: random.Random, gender: str, index: int) -> dict[str, Any]:
    first = rng.choice(FEMALE_NAMES if gender == "female" else MALE_NAMES)
    occupation = rng.choice(OCCUPATIONS)
    interests = rng.sample(HOBBIES, k=rng.randint(3, 5))
    if gender == "female":
        height = rng.randint(155, 179)
    else:
        height = rng.randint(170, 199)
    return {
        "id": str(uuid.UUID(int=rng.getrandbits(128), version=4)),
        "display_name": f"{first} {rng.choice(LAST_NAMES)}",
        "age": rng.randint(25, 40),
        "occupation": occupation,
        "bio": _bio(rng, occupation, interests),
        "avatar_url": _photo_url(gender, index),
        "interests": interests,
        "relationship_goal": rng.choice(RELATIONSHIP_GOALS),
        "gender": gender,
        "religion": rng.choice(RELIGIONS),
        "ethnicity": rng.choice(ETHNICITIES),
        "height": height,
    }


def seed_fake_profiles(db, n_profiles: int = 20, seed: int = 42, password: str = "deeplove123", reset: bool = False) -> dict[str, Any]:
    """Insert ``n_profiles`` users with generated profiles, alternating genders."""
    rng = random.Random(seed)
    if reset:
        db.execute(text("DELETE FROM swipes WHERE from_id LIKE 'seed-%' OR to_id LIKE 'seed-%'"))
        for table, key in SEED_OWNED_TABLES:
            db.execute(text(f"DELETE FROM {table} WHERE {key} LIKE 'seed-%'"))

    password_hash = hash_password(password)
    emails: list[str] = []
    for i in range(n_profiles):
        gender = "female" if i % 2 == 0 else "male"
        profile = generate_fake_profile(rng, gender, i)
        user_id = f"seed-{profile['id']}"
        email = f"seed{i + 1}.{profile['id'][:8]}@deeplove.local"
        db.execute(
            text("INSERT INTO users (id, email, password_hash) VALUES (:id, :email, :password_hash)"),
            {"id": user_id, "email": email, "password_hash": password_hash},
        )
        db.execute(
            text(
                """
                INSERT INTO profiles (
                  id, display_name, avatar_url, bio, age, occupation, interests,
                  relationship_goal, gender, religion, ethnicity, height, created_at, updated_at
                ) VALUES (
                  :id, :display_name, :avatar_url, :bio, :age, :occupation, :interests,
                  :relationship_goal, :gender, :religion, :ethnicity, :height, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
                )
                """
            ),
            {**profile, "id": user_id, "interests": json.dumps(profile["interests"])},
        )
        emails.append(email)
    db.commit()
    logger.info("[seed] inserted %s profiles (seed=%s)", n_profiles, seed)
    return {"profiles_created": n_profiles, "seed": seed, "sample_login": emails[0] if emails else None}
