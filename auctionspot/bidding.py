"""
Bid evaluation, auto-bidding and player allocation.

All functions work on an open session and commit on success. Callers that
care about concurrent submissions hold ``Store.player_lock`` around them.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from . import config
from .errors import NotFoundError, RuleViolation
from .models import Auction, AutoBidConfig, Bid, Player, Team, User
from .notifications import notify

logger = logging.getLogger(__name__)


def format_rupees(amount: int) -> str:
    """Format an amount with Indian digit grouping, e.g. 150000 -> ₹1,50,000."""
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))
    if len(digits) <= 3:
        return f"{sign}₹{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}₹{','.join(groups)},{tail}"


def rule(auction: Auction, key: str):
    rules = auction.rules or {}
    return rules.get(key, config.DEFAULT_RULES[key])


def find_bidder_team(db: Session, bidder_id: str) -> Team | None:
    """The team a bidder acts for: matched by owner id or by team id."""
    return db.scalars(
        select(Team).where(or_(Team.owner_id == bidder_id, Team.id == bidder_id))
    ).first()


def highest_bid(db: Session, auction_id: str, player_id: str) -> Bid | None:
    return db.scalars(
        select(Bid)
        .where(Bid.auction_id == auction_id, Bid.player_id == player_id)
        .order_by(Bid.amount.desc(), Bid.seq.asc())
        .limit(1)
    ).first()


def minimum_bid(auction: Auction, player: Player, previous: Bid | None) -> int:
    if previous is None:
        return player.base_price
    return previous.amount + rule(auction, "min_bid_increment")


def auto_bid_cap(max_amount: int, remaining_budget: int, percentage: float) -> int:
    """Largest amount an auto-bid config may commit for a team."""
    return min(max_amount, remaining_budget, int(remaining_budget * percentage // 100))


def _record_bid(
    db: Session,
    auction: Auction,
    player: Player,
    team: Team,
    bidder_id: str,
    bidder_name: str,
    amount: int,
    is_auto_bid: bool,
) -> Bid:
    seq = db.scalar(select(func.coalesce(func.max(Bid.seq), 0))) + 1
    bid = Bid(
        id=str(uuid.uuid4()),
        seq=seq,
        auction_id=auction.id,
        player_id=player.id,
        bidder_id=bidder_id,
        bidder_name=bidder_name,
        team_id=team.id,
        amount=amount,
        timestamp=datetime.utcnow(),
        is_auto_bid=is_auto_bid,
    )
    db.add(bid)
    player.current_bid = amount
    db.flush()
    return bid


def place_bid(
    db: Session, auction_id: str, player_id: str, bidder_id: str, amount: int
) -> tuple[Bid, Bid | None]:
    """Validate and record a bid, then give auto-bid configs one chance to answer.

    Returns the recorded bid and the auto-bid placed in response, if any.
    """
    auction = db.get(Auction, auction_id)
    if not auction:
        raise NotFoundError("Auction not found")
    if auction.status != "live":
        raise RuleViolation("Auction not live")

    player = db.get(Player, player_id)
    if not player:
        raise NotFoundError("Player not found")
    if player.sold_to_team_id is not None:
        raise RuleViolation("Player already allocated")

    team = find_bidder_team(db, bidder_id)
    if not team:
        raise NotFoundError("Team not found")
    if amount > team.remaining_budget:
        raise RuleViolation("Budget exceeded")

    previous = highest_bid(db, auction.id, player.id)
    minimum = minimum_bid(auction, player, previous)
    if amount < minimum:
        raise RuleViolation(f"Minimum acceptable bid is {format_rupees(minimum)}")

    user = db.get(User, bidder_id)
    bidder_name = user.name if user else team.owner_name
    bid = _record_bid(db, auction, player, team, bidder_id, bidder_name, amount, False)
    logger.info(
        "Bid %s on %s in %s: %s by %s", bid.id, player.id, auction.id, amount, bidder_id
    )

    if previous and previous.bidder_id != bidder_id:
        notify(
            db,
            previous.bidder_id,
            "outbid",
            "You were outbid",
            f"{bid.bidder_name} bid {format_rupees(amount)} for {player.name}",
            payload={"playerId": player.id},
        )

    auto_bid = apply_auto_bid(db, auction, player, bid)
    db.commit()
    return bid, auto_bid


def apply_auto_bid(db: Session, auction: Auction, player: Player, previous: Bid | None) -> Bid | None:
    """Answer a bid with the strongest active auto-bid config, at most once."""
    if not rule(auction, "allow_auto_bid"):
        return None

    config_row = db.scalars(
        select(AutoBidConfig)
        .where(
            AutoBidConfig.auction_id == auction.id,
            AutoBidConfig.player_id == player.id,
            AutoBidConfig.active.is_(True),
        )
        .order_by(AutoBidConfig.max_amount.desc())
        .limit(1)
    ).first()
    if not config_row:
        return None

    team = db.get(Team, config_row.team_id)
    if not team:
        return None

    minimum = minimum_bid(auction, player, previous)
    capped = auto_bid_cap(
        config_row.max_amount,
        team.remaining_budget,
        rule(auction, "max_auto_bid_percentage"),
    )
    if capped < minimum:
        logger.debug(
            "Auto-bid for %s on %s capped at %s, below minimum %s",
            team.id, player.id, capped, minimum,
        )
        return None

    amount = min(capped, minimum)
    auto_bid = _record_bid(
        db, auction, player, team, team.owner_id, team.owner_name, amount, True
    )
    notify(
        db,
        team.owner_id,
        "bid",
        "Auto-Bid Triggered",
        f"Auto-bid placed {format_rupees(amount)} on {player.name}",
    )
    logger.info("Auto-bid %s on %s for team %s: %s", auto_bid.id, player.id, team.id, amount)
    return auto_bid


def close_player(db: Session, auction_id: str, player_id: str) -> tuple[Player, Team]:
    """Allocate a player to the team holding the highest bid and debit its budget."""
    auction = db.get(Auction, auction_id)
    player = db.get(Player, player_id)
    if not auction or not player:
        raise NotFoundError("Not found")
    if player.sold_to_team_id is not None:
        raise RuleViolation("Player already allocated")

    best = highest_bid(db, auction.id, player.id)
    if not best:
        raise RuleViolation("No bids placed")

    team = db.get(Team, best.team_id)
    if not team:
        raise RuleViolation("Winning team missing")

    player.sold_to = team.name
    player.sold_price = best.amount
    player.sold_at = datetime.utcnow()
    player.sold_to_team = team
    team.remaining_budget -= best.amount

    notify(
        db,
        team.owner_id,
        "won",
        "Player allocated",
        f"{player.name} joined {team.name} for {format_rupees(best.amount)}",
        payload={"playerId": player.id},
    )
    db.commit()
    logger.info(
        "Allocated %s to %s for %s (remaining %s)",
        player.id, team.id, best.amount, team.remaining_budget,
    )
    return player, team
