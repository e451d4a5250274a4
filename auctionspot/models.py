from __future__ import annotations

from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String, default="viewer")
    team_id: Mapped[str | None] = mapped_column(String, nullable=True)
    avatar: Mapped[str] = mapped_column(String, default="")


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    owner_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    owner_name: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[str] = mapped_column(String, default="")
    budget: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_budget: Mapped[int] = mapped_column(Integer, nullable=False)
    captain_id: Mapped[str | None] = mapped_column(String, nullable=True)
    sport_focus: Mapped[list] = mapped_column(JSON, default=list)

    roster: Mapped[list["Player"]] = relationship(
        back_populates="sold_to_team",
        lazy="selectin",
        order_by="Player.sold_at",
    )


class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    entity: Mapped[str] = mapped_column(String, default="")
    department: Mapped[str] = mapped_column(String, default="")
    location: Mapped[str] = mapped_column(String, default="")
    criteria: Mapped[str] = mapped_column(String, default="Intermediate")
    gender: Mapped[str] = mapped_column(String, default="Other")
    employment_type: Mapped[str] = mapped_column(String, default="Full-time")
    games: Mapped[list] = mapped_column(JSON, default=list)
    is_captain: Mapped[bool] = mapped_column(Boolean, default=False)
    avatar: Mapped[str] = mapped_column(String, default="")
    brief: Mapped[str] = mapped_column(String, default="")
    sport_category: Mapped[str] = mapped_column(String, default="Cricket")
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)
    current_bid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sold_to: Mapped[str | None] = mapped_column(String, nullable=True)
    sold_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sold_to_team_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("teams.id"), nullable=True
    )
    sold_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    sold_to_team: Mapped["Team | None"] = relationship(back_populates="roster")


class Auction(Base):
    __tablename__ = "auctions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    status: Mapped[str] = mapped_column(String, default="draft")
    scheduled_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    player_ids: Mapped[list] = mapped_column(JSON, default=list)
    current_player_id: Mapped[str | None] = mapped_column(String, nullable=True)
    rules: Mapped[dict] = mapped_column(JSON, nullable=False)
    timeline: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Bid(Base):
    __tablename__ = "bids"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Insertion order breaks ties between equal amounts.
    seq: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    auction_id: Mapped[str] = mapped_column(String, ForeignKey("auctions.id"), index=True)
    player_id: Mapped[str] = mapped_column(String, ForeignKey("players.id"), index=True)
    bidder_id: Mapped[str] = mapped_column(String, nullable=False)
    bidder_name: Mapped[str] = mapped_column(String, nullable=False)
    team_id: Mapped[str] = mapped_column(String, ForeignKey("teams.id"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    is_auto_bid: Mapped[bool] = mapped_column(Boolean, default=False)


class AutoBidConfig(Base):
    __tablename__ = "auto_bid_configs"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    auction_id: Mapped[str] = mapped_column(String, ForeignKey("auctions.id"), index=True)
    player_id: Mapped[str] = mapped_column(String, ForeignKey("players.id"), index=True)
    team_id: Mapped[str] = mapped_column(String, ForeignKey("teams.id"), nullable=False)
    max_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    type: Mapped[str] = mapped_column(String, default="info")
    title: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(String, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
