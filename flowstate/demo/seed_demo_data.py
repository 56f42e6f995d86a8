# flowstate/demo/seed_demo_data.py

from typing import List

from flowstate.storage.db import DEFAULT_DB_PATH
from flowstate.storage.models import UserProfile
from flowstate.storage.repository import FlowStateRepository, initialize_schema

DEMO_PROFILES: List[UserProfile] = [
    UserProfile(user_id="u1", username="Elara Vance", monthly_usage=840),
    UserProfile(user_id="u2", username="Kai Tanaka", monthly_usage=920),
    UserProfile(user_id="u3", username="Sarah Jenkins", monthly_usage=1150),
    UserProfile(user_id="u4", username="David Chen", monthly_usage=1240),
    UserProfile(user_id="u5", username="Marcus O.", monthly_usage=1300),
]


def seed_demo_data(db_path: str = DEFAULT_DB_PATH) -> int:
    """Insert the demo leaderboard users and return how many were stored."""
    initialize_schema(db_path)
    repository = FlowStateRepository(db_path)
    for profile in DEMO_PROFILES:
        repository.create_profile(profile)
        repository.update_public_usage(profile.user_id, profile.monthly_usage)
    return len(DEMO_PROFILES)


if __name__ == "__main__":
    count = seed_demo_data()
    print(f"Inserted {count} demo users")
