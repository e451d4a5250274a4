from __future__ import annotations

import pytest
from sqlalchemy import select

from auctionspot.bidding import (
    auto_bid_cap,
    close_player,
    format_rupees,
    highest_bid,
    place_bid,
)
from auctionspot.errors import NotFoundError, RuleViolation
from auctionspot.models import Auction, AutoBidConfig, Bid, Notification, Player, Team

from conftest import DRAFT, LIVE


def _add_auto_bid(db, player_id, team_id, max_amount, active=True):
    db.add(
        AutoBidConfig(
            id=f"auto-{team_id}-{player_id}",
            auction_id=LIVE,
            player_id=player_id,
            team_id=team_id,
            max_amount=max_amount,
            active=active,
        )
    )
    db.commit()


def _notifications(db, user_id):
    return db.scalars(select(Notification).where(Notification.user_id == user_id)).all()


@pytest.mark.parametrize(
    "amount, expected",
    [
        (999, "₹999"),
        (10000, "₹10,000"),
        (150000, "₹1,50,000"),
        (12345678, "₹1,23,45,678"),
    ],
)
def test_format_rupees_uses_indian_grouping(amount, expected):
    assert format_rupees(amount) == expected


def test_first_bid_must_reach_base_price(db):
    with pytest.raises(RuleViolation) as exc:
        place_bid(db, LIVE, "p-1", "user-a", 9000)
    assert exc.value.message == "Minimum acceptable bid is ₹10,000"

    bid, auto_bid = place_bid(db, LIVE, "p-1", "user-a", 10000)
    assert bid.amount == 10000
    assert bid.team_id == "team-a"
    assert bid.bidder_name == "Rohan Gupta"
    assert not bid.is_auto_bid
    assert auto_bid is None
    assert db.get(Player, "p-1").current_bid == 10000


def test_next_bid_must_add_minimum_increment(db):
    place_bid(db, LIVE, "p-1", "user-a", 10000)

    with pytest.raises(RuleViolation) as exc:
        place_bid(db, LIVE, "p-1", "user-b", 14999)
    assert exc.value.message == "Minimum acceptable bid is ₹15,000"

    bid, _ = place_bid(db, LIVE, "p-1", "user-b", 15000)
    assert highest_bid(db, LIVE, "p-1").id == bid.id


def test_bid_over_remaining_budget_is_rejected(db):
    with pytest.raises(RuleViolation) as exc:
        place_bid(db, LIVE, "p-1", "user-c", 13000)
    assert exc.value.message == "Budget exceeded"
    assert db.scalars(select(Bid)).all() == []


def test_bid_requires_live_auction(db):
    with pytest.raises(RuleViolation) as exc:
        place_bid(db, DRAFT, "p-1", "user-a", 10000)
    assert exc.value.message == "Auction not live"
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "auction_id, player_id, bidder_id, message",
    [
        ("missing", "p-1", "user-a", "Auction not found"),
        (LIVE, "missing", "user-a", "Player not found"),
        (LIVE, "p-1", "nobody", "Team not found"),
    ],
)
def test_bid_on_unknown_entities(db, auction_id, player_id, bidder_id, message):
    with pytest.raises(NotFoundError) as exc:
        place_bid(db, auction_id, player_id, bidder_id, 10000)
    assert exc.value.message == message
    assert exc.value.status_code == 404


def test_bidder_can_be_a_team_id(db):
    bid, _ = place_bid(db, LIVE, "p-1", "team-c", 10000)
    assert bid.team_id == "team-c"
    # No user record for the team id, so the owner name is used.
    assert bid.bidder_name == "Amit Patel"


def test_outbid_notification_goes_to_previous_leader(db):
    place_bid(db, LIVE, "p-1", "user-a", 10000)
    place_bid(db, LIVE, "p-1", "user-b", 15000)

    notes = _notifications(db, "user-a")
    assert [note.type for note in notes] == ["outbid"]
    assert notes[0].message == "Priya Verma bid ₹15,000 for Asha Rao"
    assert notes[0].payload == {"playerId": "p-1"}
    assert _notifications(db, "user-b") == []


def test_raising_own_bid_does_not_notify(db):
    place_bid(db, LIVE, "p-1", "user-a", 10000)
    place_bid(db, LIVE, "p-1", "user-a", 15000)
    assert _notifications(db, "user-a") == []


def test_auto_bid_cap_takes_the_smallest_limit():
    assert auto_bid_cap(50000, 12000, 40) == 4800
    assert auto_bid_cap(3000, 12000, 40) == 3000
    assert auto_bid_cap(50000, 12000, 100) == 12000


def test_auto_bid_capped_by_percentage_does_not_fire(db):
    _add_auto_bid(db, "p-1", "team-c", 50000)

    _, auto_bid = place_bid(db, LIVE, "p-1", "user-a", 10000)

    assert auto_bid is None
    assert len(db.scalars(select(Bid)).all()) == 1


def test_auto_bid_answers_with_minimum_acceptable_amount(db):
    _add_auto_bid(db, "p-2", "team-b", 100000)

    bid, auto_bid = place_bid(db, LIVE, "p-2", "user-a", 20000)

    assert auto_bid is not None
    assert auto_bid.amount == bid.amount + 5000
    assert auto_bid.is_auto_bid
    assert auto_bid.bidder_id == "user-b"
    assert auto_bid.team_id == "team-b"
    assert highest_bid(db, LIVE, "p-2").id == auto_bid.id
    assert db.get(Player, "p-2").current_bid == 25000

    notes = _notifications(db, "user-b")
    assert [note.title for note in notes] == ["Auto-Bid Triggered"]
    assert notes[0].message == "Auto-bid placed ₹25,000 on Vikram Singh"


def test_only_the_strongest_auto_bid_fires_once(db):
    _add_auto_bid(db, "p-2", "team-c", 10000)
    _add_auto_bid(db, "p-2", "team-b", 60000)
    _add_auto_bid(db, "p-2", "team-a", 30000)

    _, auto_bid = place_bid(db, LIVE, "p-2", "user-a", 20000)

    assert auto_bid.team_id == "team-b"
    assert len(db.scalars(select(Bid)).all()) == 2


def test_inactive_auto_bid_is_ignored(db):
    _add_auto_bid(db, "p-2", "team-b", 60000, active=False)
    _, auto_bid = place_bid(db, LIVE, "p-2", "user-a", 20000)
    assert auto_bid is None


def test_auto_bid_disabled_by_rules(db):
    auction = db.get(Auction, LIVE)
    auction.rules = {**auction.rules, "allow_auto_bid": False}
    db.commit()
    _add_auto_bid(db, "p-2", "team-b", 100000)

    _, auto_bid = place_bid(db, LIVE, "p-2", "user-a", 20000)

    assert auto_bid is None


def test_close_allocates_to_highest_bidder(db):
    place_bid(db, LIVE, "p-1", "user-a", 10000)
    place_bid(db, LIVE, "p-1", "user-b", 15000)

    player, team = close_player(db, LIVE, "p-1")

    assert team.id == "team-b"
    assert team.remaining_budget == 500000 - 15000
    assert player.sold_price == 15000
    assert player.sold_to == "Bengaluru Blitz"
    assert [member.id for member in team.roster] == ["p-1"]
    assert db.get(Team, "team-a").remaining_budget == 500000

    notes = _notifications(db, "user-b")
    assert notes[-1].type == "won"
    assert notes[-1].message == "Asha Rao joined Bengaluru Blitz for ₹15,000"


def test_close_without_bids_is_rejected(db):
    with pytest.raises(RuleViolation) as exc:
        close_player(db, LIVE, "p-3")
    assert exc.value.message == "No bids placed"


def test_close_unknown_player(db):
    with pytest.raises(NotFoundError):
        close_player(db, LIVE, "missing")


def test_close_debits_only_once(db):
    place_bid(db, LIVE, "p-1", "user-b", 10000)
    close_player(db, LIVE, "p-1")

    with pytest.raises(RuleViolation) as exc:
        close_player(db, LIVE, "p-1")
    assert exc.value.message == "Player already allocated"
    assert db.get(Team, "team-b").remaining_budget == 490000


def test_allocated_player_takes_no_more_bids(db):
    place_bid(db, LIVE, "p-1", "user-b", 10000)
    close_player(db, LIVE, "p-1")

    with pytest.raises(RuleViolation) as exc:
        place_bid(db, LIVE, "p-1", "user-a", 50000)
    assert exc.value.message == "Player already allocated"
