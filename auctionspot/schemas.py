from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


GameType = Literal["Cricket", "Football", "Basketball", "Tennis", "Badminton", "Hockey"]
PlayerCriteria = Literal["Elite", "Professional", "Intermediate", "Beginner"]
Gender = Literal["Male", "Female", "Other"]
EmploymentType = Literal["Full-time", "Part-time", "Contract"]
UserRole = Literal["admin", "bidder", "viewer"]
NotificationType = Literal["bid", "outbid", "won", "auction_start", "auction_end", "info"]
StageKey = Literal[
    "auction_setup",
    "team_registration",
    "auction_start",
    "bidding_process",
    "player_allocation",
    "auction_continuation",
    "post_auction_results",
    "tournament_integration",
]


class AuctionStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    LIVE = "live"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class BaseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GameRating(BaseSchema):
    game: GameType
    rating: int = Field(..., ge=1, le=10)


class PlayerFields(BaseSchema):
    name: Optional[str] = None
    entity: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    criteria: Optional[PlayerCriteria] = None
    gender: Optional[Gender] = None
    employment_type: Optional[EmploymentType] = Field(default=None, alias="employmentType")
    games: Optional[list[GameRating]] = None
    is_captain: Optional[bool] = Field(default=None, alias="isCaptain")
    avatar: Optional[str] = None
    brief: Optional[str] = None
    sport_category: Optional[GameType] = Field(default=None, alias="sportCategory")
    base_price: Optional[int] = Field(default=None, gt=0, alias="basePrice")


class PlayerCreate(PlayerFields):
    pass


class PlayerUpdate(PlayerFields):
    current_bid: Optional[int] = Field(default=None, ge=0, alias="currentBid")
    sold_to: Optional[str] = Field(default=None, alias="soldTo")
    sold_price: Optional[int] = Field(default=None, ge=0, alias="soldPrice")


class PlayerOut(BaseSchema):
    id: str
    name: str
    entity: str
    department: str
    location: str
    criteria: str
    gender: str
    employment_type: str = Field(..., alias="employmentType")
    games: list[GameRating]
    is_captain: bool = Field(False, alias="isCaptain")
    avatar: str
    brief: str
    sport_category: str = Field(..., alias="sportCategory")
    base_price: int = Field(..., alias="basePrice")
    current_bid: Optional[int] = Field(default=None, alias="currentBid")
    sold_to: Optional[str] = Field(default=None, alias="soldTo")
    sold_price: Optional[int] = Field(default=None, alias="soldPrice")


class PlayerListOut(BaseSchema):
    data: list[PlayerOut]
    total: int


class TeamOut(BaseSchema):
    id: str
    name: str
    owner_id: str = Field(..., alias="ownerId")
    owner_name: str = Field(..., alias="ownerName")
    location: str
    budget: int
    remaining_budget: int = Field(..., alias="remainingBudget")
    players: list[PlayerOut] = []
    captain_id: Optional[str] = Field(default=None, alias="captainId")
    sport_focus: list[str] = Field(default_factory=list, alias="sportFocus")


class AuctionRules(BaseSchema):
    min_bid_increment: int = Field(..., ge=0, alias="minBidIncrement")
    max_players_per_team: int = Field(..., ge=1, alias="maxPlayersPerTeam")
    initial_budget: int = Field(..., ge=0, alias="initialBudget")
    bid_timeout: int = Field(..., ge=1, alias="bidTimeout")
    allow_auto_bid: bool = Field(..., alias="allowAutoBid")
    max_auto_bid_percentage: float = Field(..., ge=0, le=100, alias="maxAutoBidPercentage")
    league_name: str = Field("", alias="leagueName")


class AuctionRulesUpdate(BaseSchema):
    min_bid_increment: Optional[int] = Field(default=None, ge=0, alias="minBidIncrement")
    max_players_per_team: Optional[int] = Field(default=None, ge=1, alias="maxPlayersPerTeam")
    initial_budget: Optional[int] = Field(default=None, ge=0, alias="initialBudget")
    bid_timeout: Optional[int] = Field(default=None, ge=1, alias="bidTimeout")
    allow_auto_bid: Optional[bool] = Field(default=None, alias="allowAutoBid")
    max_auto_bid_percentage: Optional[float] = Field(
        default=None, ge=0, le=100, alias="maxAutoBidPercentage"
    )
    league_name: Optional[str] = Field(default=None, alias="leagueName")


class TimelineStage(BaseSchema):
    key: StageKey
    title: str
    description: str
    status: Literal["pending", "active", "complete"]


class TimelineStageStamped(TimelineStage):
    timestamp: datetime


class AuctionOut(BaseSchema):
    id: str
    name: str
    description: str
    status: AuctionStatus
    scheduled_time: Optional[datetime] = Field(default=None, alias="scheduledTime")
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    player_ids: list[str] = Field(default_factory=list, alias="playerIds")
    current_player_id: Optional[str] = Field(default=None, alias="currentPlayerId")
    rules: AuctionRules
    timeline: list[TimelineStage] = []


class AuctionCreateRequest(BaseSchema):
    name: Optional[str] = None
    description: Optional[str] = None
    scheduled_time: Optional[datetime] = Field(default=None, alias="scheduledTime")
    player_ids: Optional[list[str]] = Field(default=None, alias="playerIds")
    rules: Optional[AuctionRules] = None


class AuctionStatusRequest(BaseSchema):
    status: AuctionStatus


class BidRequest(BaseSchema):
    player_id: str = Field(..., min_length=1, alias="playerId")
    bidder_id: str = Field(..., min_length=1, alias="bidderId")
    amount: int = Field(..., gt=0)


class BidOut(BaseSchema):
    id: str
    auction_id: str = Field(..., alias="auctionId")
    player_id: str = Field(..., alias="playerId")
    bidder_id: str = Field(..., alias="bidderId")
    bidder_name: str = Field(..., alias="bidderName")
    team_id: str = Field(..., alias="teamId")
    amount: int
    timestamp: datetime
    is_auto_bid: bool = Field(False, alias="isAutoBid")


class BidPlacedOut(BaseSchema):
    bid: BidOut
    auto_bid: Optional[BidOut] = Field(default=None, alias="autoBid")


class AllocationOut(BaseSchema):
    player: PlayerOut
    team: TeamOut


class AutoBidConfigRequest(BaseSchema):
    player_id: str = Field(..., min_length=1, alias="playerId")
    team_id: str = Field(..., min_length=1, alias="teamId")
    max_amount: int = Field(..., gt=0, alias="maxAmount")


class AutoBidConfigOut(BaseSchema):
    id: str
    auction_id: str = Field(..., alias="auctionId")
    player_id: str = Field(..., alias="playerId")
    team_id: str = Field(..., alias="teamId")
    max_amount: int = Field(..., alias="maxAmount")
    active: bool


class NotificationCreate(BaseSchema):
    user_id: str = Field("all", alias="userId")
    type: NotificationType = "info"
    title: str = "Update"
    message: str = "New notification"


class NotificationOut(BaseSchema):
    id: int
    user_id: str = Field(..., alias="userId")
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    payload: Optional[dict[str, Any]] = None


class UserOut(BaseSchema):
    id: str
    name: str
    email: str
    role: UserRole
    team_id: Optional[str] = Field(default=None, alias="teamId")
    avatar: str


class LoginRequest(BaseSchema):
    email: Optional[str] = None


class LoginResponse(BaseSchema):
    token: str
    user: UserOut


class AnalyticsSummaryOut(BaseSchema):
    total_players: int = Field(..., alias="totalPlayers")
    sold_players: int = Field(..., alias="soldPlayers")
    gross_spend: int = Field(..., alias="grossSpend")
    average_sell_price: int = Field(..., alias="averageSellPrice")
    live_auction_id: Optional[str] = Field(default=None, alias="liveAuctionId")
