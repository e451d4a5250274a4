"""
Demo dataset: generated players, two teams, one live auction and three users.
"""

from __future__ import annotations

import copy
import logging
import random
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from . import config
from .models import Auction, Player, Team, User

logger = logging.getLogger(__name__)

CITIES = ["Mumbai", "Bengaluru", "Delhi", "Hyderabad", "Chennai", "Pune", "Gurgaon"]
ENTITIES = ["Infosys", "TCS", "HCL", "Accenture", "Wipro", "Tech Mahindra", "Reliance"]
DEPARTMENTS = ["Engineering", "Product", "Marketing", "Sales", "Finance", "HR", "Operations"]
SPORTS = ["Cricket", "Football", "Basketball", "Tennis", "Badminton", "Hockey"]
CRITERIA = ["Elite", "Professional", "Intermediate", "Beginner"]
GENDERS = ["Male", "Female"]
EMPLOYMENT = ["Full-time", "Part-time", "Contract"]
FIRST_NAMES = ["Raj", "Priya", "Arjun", "Sneha", "Vikram", "Ishita", "Kabir", "Meera", "Dev", "Trisha"]
LAST_NAMES = ["Sharma", "Verma", "Singh", "Patel", "Iyer", "Reddy", "Menon", "Desai", "Chowdhury", "Nair"]

AVATAR_BASE = "https://res.cloudinary.com/dv1eyqkzf/image/upload/v1738456202/auctionspot"
AVATARS = [f"{AVATAR_BASE}/captain-0{n}.png" for n in range(1, 5)]

BRIEF = (
    "Indian enterprise athlete bringing clutch performances in inter-corporate "
    "leagues with proven leadership impact."
)

PLAYER_COUNT = 30
DEMO_AUCTION_ID = "auction-spot-2025"

BASE_TIMELINE = [
    {
        "key": "auction_setup",
        "title": "Auction Setup",
        "description": "Configure rules, budgets, and player pool",
        "status": "complete",
    },
    {
        "key": "team_registration",
        "title": "Team Registration",
        "description": "Captains register budgets and squad needs",
        "status": "complete",
    },
    {
        "key": "auction_start",
        "title": "Auction Start",
        "description": "Auctioneer opens live room",
        "status": "active",
    },
    {
        "key": "bidding_process",
        "title": "Bidding Process",
        "description": "Live bidding with countdown timers",
        "status": "pending",
    },
    {
        "key": "player_allocation",
        "title": "Player Allocation",
        "description": "Winners assigned to team budgets",
        "status": "pending",
    },
    {
        "key": "auction_continuation",
        "title": "Auction Continuation",
        "description": "Repeat until squads are filled",
        "status": "pending",
    },
    {
        "key": "post_auction_results",
        "title": "Post-Auction Results",
        "description": "Insights and analytics published",
        "status": "pending",
    },
    {
        "key": "tournament_integration",
        "title": "Tournament Integration",
        "description": "Teams synced with league fixtures",
        "status": "pending",
    },
]


def base_timeline() -> list[dict]:
    return copy.deepcopy(BASE_TIMELINE)


def generate_player(rng: random.Random, index: int) -> dict:
    """Column values for a made-up player; ``index`` is 1-based."""
    sport = rng.choice(SPORTS)
    picked: list[str] = []
    for game in (sport, rng.choice(SPORTS), rng.choice(SPORTS)):
        if game not in picked:
            picked.append(game)
    games = [{"game": game, "rating": rng.randint(5, 10)} for game in picked]

    return {
        "id": f"player-{index}",
        "name": f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
        "entity": rng.choice(ENTITIES),
        "department": rng.choice(DEPARTMENTS),
        "location": rng.choice(CITIES),
        "criteria": rng.choice(CRITERIA),
        "gender": rng.choice(GENDERS),
        "employment_type": rng.choice(EMPLOYMENT),
        "games": games,
        "is_captain": index == 1,
        "avatar": AVATARS[index % len(AVATARS)],
        "brief": BRIEF,
        "sport_category": sport,
        "base_price": 10000 + rng.randrange(40000),
    }


def seed_demo_data(db: Session, rng: random.Random | None = None) -> None:
    rng = rng or random.Random(config.SEED)
    players = [Player(**generate_player(rng, index)) for index in range(1, PLAYER_COUNT + 1)]
    db.add_all(players)

    db.add_all(
        [
            Team(
                id="team-umumba",
                name="U Mumba Titans",
                owner_id="user-admin",
                owner_name="AuctionSpot Control",
                location="Mumbai",
                budget=config.TEAM_BUDGET,
                remaining_budget=config.TEAM_BUDGET,
                captain_id=players[0].id,
                sport_focus=["Cricket", "Badminton"],
            ),
            Team(
                id="team-indiabulls",
                name="Bengaluru Blitz",
                owner_id="user-priya",
                owner_name="Priya Verma",
                location="Bengaluru",
                budget=config.TEAM_BUDGET,
                remaining_budget=config.TEAM_BUDGET,
                sport_focus=["Football", "Basketball"],
            ),
        ]
    )

    now = datetime.utcnow()
    db.add(
        Auction(
            id=DEMO_AUCTION_ID,
            name="AuctionSpot Premier League 2025",
            description="Enterprise sports auction for Indian corporates with multi-sport squads.",
            status="live",
            scheduled_time=now + timedelta(hours=1),
            start_time=now - timedelta(minutes=1),
            player_ids=[player.id for player in players],
            current_player_id=players[0].id,
            rules=dict(config.DEFAULT_RULES),
            timeline=base_timeline(),
        )
    )

    db.add_all(
        [
            User(
                id="user-admin",
                name="Control Admin",
                email="admin@auctionspot.in",
                role="admin",
                avatar=f"{AVATAR_BASE}/admin.png",
            ),
            User(
                id="user-priya",
                name="Priya Verma",
                email="priya@auctionspot.in",
                role="bidder",
                team_id="team-indiabulls",
                avatar=AVATARS[1],
            ),
            User(
                id="user-rohan",
                name="Rohan Gupta",
                email="rohan@auctionspot.in",
                role="bidder",
                team_id="team-umumba",
                avatar=AVATARS[2],
            ),
        ]
    )
    db.commit()
    logger.info("Seeded %d players, 2 teams, 1 auction, 3 users", len(players))
