from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auctionspot import config
from auctionspot.db import Store, get_store
from auctionspot.main import app
from auctionspot.models import Auction, Player, Team, User
from auctionspot.seed import base_timeline

ADMIN = {"X-User-Role": "admin", "X-User-Id": "user-admin"}
BIDDER_A = {"X-User-Role": "bidder", "X-User-Id": "user-a"}
BIDDER_B = {"X-User-Role": "bidder", "X-User-Id": "user-b"}

LIVE = "auction-live"
DRAFT = "auction-draft"


def _populate(db) -> None:
    db.add_all(
        [
            Player(
                id="p-1",
                name="Asha Rao",
                entity="Infosys",
                department="Engineering",
                location="Pune",
                games=[{"game": "Cricket", "rating": 8}],
                sport_category="Cricket",
                base_price=10000,
            ),
            Player(
                id="p-2",
                name="Vikram Singh",
                entity="TCS",
                department="Sales",
                location="Delhi",
                games=[{"game": "Football", "rating": 6}, {"game": "Cricket", "rating": 9}],
                sport_category="Football",
                base_price=20000,
            ),
            Player(
                id="p-3",
                name="Meera Nair",
                entity="Wipro",
                department="Finance",
                location="Chennai",
                games=[{"game": "Tennis", "rating": 10}],
                sport_category="Tennis",
                base_price=15000,
            ),
            Team(
                id="team-a",
                name="Mumbai Mavericks",
                owner_id="user-a",
                owner_name="Rohan Gupta",
                location="Mumbai",
                budget=500000,
                remaining_budget=500000,
            ),
            Team(
                id="team-b",
                name="Bengaluru Blitz",
                owner_id="user-b",
                owner_name="Priya Verma",
                location="Bengaluru",
                budget=500000,
                remaining_budget=500000,
            ),
            Team(
                id="team-c",
                name="Delhi Dynamos",
                owner_id="user-c",
                owner_name="Amit Patel",
                location="Delhi",
                budget=12000,
                remaining_budget=12000,
            ),
            User(id="user-admin", name="Control Admin", email="admin@auctionspot.in", role="admin"),
            User(id="user-a", name="Rohan Gupta", email="rohan@auctionspot.in", role="bidder", team_id="team-a"),
            User(id="user-b", name="Priya Verma", email="priya@auctionspot.in", role="bidder", team_id="team-b"),
            Auction(
                id=LIVE,
                name="Live Auction",
                status="live",
                player_ids=["p-1", "p-2", "p-3"],
                rules=dict(config.DEFAULT_RULES),
                timeline=base_timeline(),
            ),
            Auction(
                id=DRAFT,
                name="Draft Auction",
                status="draft",
                player_ids=["p-1"],
                rules=dict(config.DEFAULT_RULES),
                timeline=base_timeline(),
            ),
        ]
    )
    db.commit()


@pytest.fixture
def store():
    store = Store("sqlite://")
    store.create_all()
    with store.session() as db:
        _populate(db)
    yield store
    store.dispose()


@pytest.fixture
def db(store):
    session = store.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
