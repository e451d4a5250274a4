from __future__ import annotations

import os
import threading

from sqlalchemy import func, select

from auctionspot.bidding import _record_bid
from auctionspot.db import Store
from auctionspot.models import Auction, Bid, Player, Team

from conftest import ADMIN, LIVE


def _bid_count(store):
    with store.session() as db:
        return db.scalar(select(func.count()).select_from(Bid))


def test_closing_one_session_keeps_anothers_pending_bid(store):
    writer = store.session()
    auction = writer.get(Auction, LIVE)
    player = writer.get(Player, "p-1")
    team = writer.get(Team, "team-a")
    _record_bid(writer, auction, player, team, "user-a", "Rohan Gupta", 10000, False)

    reader = store.session()
    reader.scalars(select(Team)).all()
    reader.close()

    writer.commit()
    writer.close()

    assert _bid_count(store) == 1


def test_uncommitted_bid_is_invisible_to_other_sessions(store):
    writer = store.session()
    _record_bid(
        writer,
        writer.get(Auction, LIVE),
        writer.get(Player, "p-1"),
        writer.get(Team, "team-a"),
        "user-a",
        "Rohan Gupta",
        10000,
        False,
    )
    try:
        assert _bid_count(store) == 0
    finally:
        writer.rollback()
        writer.close()
    assert _bid_count(store) == 0


def test_concurrent_opening_bids_accept_only_one(client):
    start = threading.Barrier(2)
    responses = {}

    def submit(bidder_id):
        start.wait()
        responses[bidder_id] = client.post(
            f"/api/auctions/{LIVE}/bids",
            json={"playerId": "p-1", "bidderId": bidder_id, "amount": 10000},
        )

    threads = [threading.Thread(target=submit, args=(bidder,)) for bidder in ("user-a", "user-b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    codes = sorted(response.status_code for response in responses.values())
    assert codes == [201, 400]
    rejected = next(r for r in responses.values() if r.status_code == 400)
    assert rejected.json() == {"detail": "Minimum acceptable bid is ₹15,000"}

    bids = client.get(f"/api/auctions/{LIVE}/bids").json()
    assert [bid["amount"] for bid in bids] == [10000]


def test_finished_auction_drops_its_locks(client, store):
    with store.player_lock(LIVE, "p-1"):
        pass
    with store.player_lock("other", "p-1"):
        pass

    response = client.patch(f"/api/auctions/{LIVE}/status", json={"status": "completed"}, headers=ADMIN)
    assert response.status_code == 200
    assert set(store._locks) == {("other", "p-1")}


def test_dispose_removes_backing_file():
    store = Store("sqlite://")
    store.create_all()
    path = store.url.removeprefix("sqlite:///")
    store.dispose()
    assert not os.path.exists(path)
