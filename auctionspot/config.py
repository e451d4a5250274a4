"""
Runtime configuration for the AuctionSpot API, read from the environment.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


DATABASE_URL = os.getenv("AUCTIONSPOT_DATABASE_URL", "sqlite://")
SEED_DEMO_DATA = _env_flag("AUCTIONSPOT_SEED_DEMO_DATA", "1")
SEED = _env_int("AUCTIONSPOT_SEED")

LOG_LEVEL = os.getenv("AUCTIONSPOT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("AUCTIONSPOT_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

MOCK_TOKEN = os.getenv("AUCTIONSPOT_MOCK_TOKEN", "mock-jwt-token")

# Rules applied to new auctions when no auction exists to copy them from
DEFAULT_RULES = {
    "min_bid_increment": 5000,
    "max_players_per_team": 11,
    "initial_budget": 500000,
    "bid_timeout": 30,  # seconds
    "allow_auto_bid": True,
    "max_auto_bid_percentage": 40,  # % of remaining budget
    "league_name": "AuctionSpot Premier League",
}

TEAM_BUDGET = 500000
PLAYER_LIST_LIMIT = 50
