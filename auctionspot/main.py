from __future__ import annotations

import logging
import random
import sys
import uuid
from datetime import datetime
from typing import Iterable, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import config
from .auth import Principal, get_principal, require_role
from .bidding import close_player, place_bid
from .db import Store, get_db, get_store
from .errors import AuctionError, Forbidden, NotFoundError, RuleViolation, Unauthorized
from .models import Auction, AutoBidConfig, Bid, Notification, Player, Team, User
from .notifications import notifications_for, notify
from .schemas import (
    AllocationOut,
    AnalyticsSummaryOut,
    AuctionCreateRequest,
    AuctionOut,
    AuctionRules,
    AuctionRulesUpdate,
    AuctionStatus,
    AuctionStatusRequest,
    AutoBidConfigOut,
    AutoBidConfigRequest,
    BidOut,
    BidPlacedOut,
    BidRequest,
    LoginRequest,
    LoginResponse,
    NotificationCreate,
    NotificationOut,
    PlayerCreate,
    PlayerListOut,
    PlayerOut,
    PlayerUpdate,
    TeamOut,
    TimelineStage,
    TimelineStageStamped,
    UserOut,
)
from .seed import base_timeline, generate_player, seed_demo_data

logging.basicConfig(
    level=config.LOG_LEVEL,
    format=config.LOG_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

app = FastAPI(title="AuctionSpot API", version="0.1.0")
app.state.store = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("API %s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(AuctionError)
async def auction_error_handler(request: Request, exc: AuctionError) -> JSONResponse:
    logger.warning(
        "%s %s rejected with %s: %s",
        request.method, request.url.path, exc.status_code, exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def on_startup() -> None:
    if app.state.store is not None:
        return
    store = Store(config.DATABASE_URL)
    store.create_all()
    if config.SEED_DEMO_DATA:
        with store.session() as db:
            if not db.scalar(select(func.count()).select_from(Auction)):
                seed_demo_data(db)
    app.state.store = store
    logger.info("AuctionSpot API started")


@app.on_event("shutdown")
def on_shutdown() -> None:
    store: Store | None = app.state.store
    if store is not None:
        store.dispose()


def _player_to_out(player: Player) -> PlayerOut:
    return PlayerOut(
        id=player.id,
        name=player.name,
        entity=player.entity,
        department=player.department,
        location=player.location,
        criteria=player.criteria,
        gender=player.gender,
        employment_type=player.employment_type,
        games=player.games or [],
        is_captain=player.is_captain,
        avatar=player.avatar,
        brief=player.brief,
        sport_category=player.sport_category,
        base_price=player.base_price,
        current_bid=player.current_bid,
        sold_to=player.sold_to,
        sold_price=player.sold_price,
    )


def _players_out(players: Iterable[Player]) -> list[PlayerOut]:
    return [_player_to_out(player) for player in players]


def _team_to_out(team: Team) -> TeamOut:
    return TeamOut(
        id=team.id,
        name=team.name,
        owner_id=team.owner_id,
        owner_name=team.owner_name,
        location=team.location,
        budget=team.budget,
        remaining_budget=team.remaining_budget,
        players=_players_out(team.roster),
        captain_id=team.captain_id,
        sport_focus=team.sport_focus or [],
    )


def _auction_to_out(auction: Auction) -> AuctionOut:
    return AuctionOut(
        id=auction.id,
        name=auction.name,
        description=auction.description,
        status=auction.status,
        scheduled_time=auction.scheduled_time,
        start_time=auction.start_time,
        end_time=auction.end_time,
        player_ids=auction.player_ids or [],
        current_player_id=auction.current_player_id,
        rules=AuctionRules(**auction.rules),
        timeline=[TimelineStage(**stage) for stage in auction.timeline or []],
    )


def _bid_to_out(bid: Bid) -> BidOut:
    return BidOut(
        id=bid.id,
        auction_id=bid.auction_id,
        player_id=bid.player_id,
        bidder_id=bid.bidder_id,
        bidder_name=bid.bidder_name,
        team_id=bid.team_id,
        amount=bid.amount,
        timestamp=bid.timestamp,
        is_auto_bid=bid.is_auto_bid,
    )


def _auto_bid_to_out(config_row: AutoBidConfig) -> AutoBidConfigOut:
    return AutoBidConfigOut(
        id=config_row.id,
        auction_id=config_row.auction_id,
        player_id=config_row.player_id,
        team_id=config_row.team_id,
        max_amount=config_row.max_amount,
        active=config_row.active,
    )


def _notification_to_out(notification: Notification) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        user_id=notification.user_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        timestamp=notification.timestamp,
        read=notification.read,
        payload=notification.payload,
    )


def _user_to_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        team_id=user.team_id,
        avatar=user.avatar,
    )


def _get_auction(db: Session, auction_id: str) -> Auction:
    auction = db.get(Auction, auction_id)
    if not auction:
        raise NotFoundError("Auction not found")
    return auction


def _average_rating(player: Player) -> float:
    games = player.games or []
    if not games:
        return 0.0
    return sum(game["rating"] for game in games) / len(games)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "time": datetime.utcnow().isoformat()}


@app.post("/api/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    user = None
    if payload.email:
        user = db.scalars(select(User).where(User.email == payload.email)).first()
    if not user:
        raise Unauthorized("Invalid credentials")
    return LoginResponse(token=config.MOCK_TOKEN, user=_user_to_out(user))


# --- Players -----------------------------------------------------------------


@app.get("/api/players", response_model=PlayerListOut)
def list_players(
    search: str = "",
    game: Optional[str] = None,
    limit: int = Query(config.PLAYER_LIST_LIMIT, ge=0),
    sort: str = "name",
    db: Session = Depends(get_db),
) -> PlayerListOut:
    needle = search.lower()
    players = [
        player
        for player in db.scalars(select(Player)).all()
        if needle in f"{player.name} {player.entity} {player.department} {player.location}".lower()
        and (not game or any(entry["game"] == game for entry in player.games or []))
    ]
    if sort == "rating":
        players.sort(key=_average_rating, reverse=True)
    else:
        players.sort(key=lambda player: player.name.casefold())
    players = players[:limit]
    return PlayerListOut(data=_players_out(players), total=len(players))


@app.get("/api/players/{player_id}", response_model=PlayerOut)
def get_player(player_id: str, db: Session = Depends(get_db)) -> PlayerOut:
    player = db.get(Player, player_id)
    if not player:
        raise NotFoundError("Player not found")
    return _player_to_out(player)


@app.post("/api/players", response_model=PlayerOut, status_code=status.HTTP_201_CREATED)
def create_player(
    payload: PlayerCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> PlayerOut:
    require_role(principal, "admin")
    count = db.scalar(select(func.count()).select_from(Player))
    values = generate_player(random.Random(), count + 1)
    values.update(payload.model_dump(exclude_unset=True, exclude_none=True))
    values["id"] = str(uuid.uuid4())
    player = Player(**values)
    db.add(player)
    db.commit()
    logger.info("Created player %s (%s)", player.id, player.name)
    return _player_to_out(player)


@app.put("/api/players/{player_id}", response_model=PlayerOut)
def update_player(
    player_id: str,
    payload: PlayerUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> PlayerOut:
    require_role(principal, "admin")
    player = db.get(Player, player_id)
    if not player:
        raise NotFoundError("Player not found")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if player.sold_to_team_id is None and ({"sold_to", "sold_price"} & changes.keys()):
        # Sale fields only follow a close, which also sets the owning team.
        raise RuleViolation("Player not allocated")
    for field, value in changes.items():
        setattr(player, field, value)
    db.commit()
    return _player_to_out(player)


# --- Auctions ----------------------------------------------------------------


@app.get("/api/auctions", response_model=list[AuctionOut])
def list_auctions(db: Session = Depends(get_db)) -> list[AuctionOut]:
    auctions = db.scalars(select(Auction).order_by(Auction.created_at)).all()
    return [_auction_to_out(auction) for auction in auctions]


@app.get("/api/auctions/{auction_id}", response_model=AuctionOut)
def get_auction(auction_id: str, db: Session = Depends(get_db)) -> AuctionOut:
    return _auction_to_out(_get_auction(db, auction_id))


@app.post("/api/auctions", response_model=AuctionOut, status_code=status.HTTP_201_CREATED)
def create_auction(
    payload: AuctionCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> AuctionOut:
    require_role(principal, "admin")
    if payload.rules is not None:
        rules = payload.rules.model_dump()
    else:
        first = db.scalars(select(Auction).order_by(Auction.created_at)).first()
        rules = dict(first.rules) if first else dict(config.DEFAULT_RULES)
    player_ids = payload.player_ids
    if player_ids is None:
        player_ids = list(db.scalars(select(Player.id)).all())
    auction = Auction(
        id=str(uuid.uuid4()),
        name=payload.name or "Untitled Auction",
        description=payload.description or "",
        status=AuctionStatus.DRAFT.value,
        scheduled_time=payload.scheduled_time,
        player_ids=player_ids,
        rules=rules,
        timeline=base_timeline(),
    )
    db.add(auction)
    db.commit()
    logger.info("Created auction %s (%s)", auction.id, auction.name)
    return _auction_to_out(auction)


@app.patch("/api/auctions/{auction_id}/status", response_model=AuctionOut)
def update_auction_status(
    auction_id: str,
    payload: AuctionStatusRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> AuctionOut:
    require_role(principal, "admin")
    auction = _get_auction(db, auction_id)
    previous = auction.status
    auction.status = payload.status.value
    if payload.status is AuctionStatus.LIVE:
        auction.start_time = datetime.utcnow()
    if payload.status is AuctionStatus.COMPLETED:
        auction.end_time = datetime.utcnow()
    db.commit()
    if payload.status in (AuctionStatus.COMPLETED, AuctionStatus.ARCHIVED):
        store.release_locks(auction.id)
    logger.info("Auction %s status %s -> %s", auction.id, previous, auction.status)
    return _auction_to_out(auction)


@app.patch("/api/auctions/{auction_id}/rules", response_model=AuctionRules)
def update_auction_rules(
    auction_id: str,
    payload: AuctionRulesUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> AuctionRules:
    require_role(principal, "admin")
    auction = _get_auction(db, auction_id)
    auction.rules = {
        **auction.rules,
        **payload.model_dump(exclude_unset=True, exclude_none=True),
    }
    db.commit()
    return AuctionRules(**auction.rules)


@app.get("/api/auctions/{auction_id}/timeline", response_model=list[TimelineStage])
def get_auction_timeline(auction_id: str, db: Session = Depends(get_db)) -> list[TimelineStage]:
    auction = _get_auction(db, auction_id)
    return [TimelineStage(**stage) for stage in auction.timeline or []]


# --- Bidding -----------------------------------------------------------------


@app.get("/api/auctions/{auction_id}/bids", response_model=list[BidOut])
def list_bids(auction_id: str, db: Session = Depends(get_db)) -> list[BidOut]:
    auction = _get_auction(db, auction_id)
    bids = db.scalars(
        select(Bid).where(Bid.auction_id == auction.id).order_by(Bid.seq)
    ).all()
    return [_bid_to_out(bid) for bid in bids]


@app.post(
    "/api/auctions/{auction_id}/bids",
    response_model=BidPlacedOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_bid(
    auction_id: str,
    payload: BidRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
) -> BidPlacedOut:
    with store.player_lock(auction_id, payload.player_id):
        bid, auto_bid = place_bid(
            db, auction_id, payload.player_id, payload.bidder_id, payload.amount
        )
    return BidPlacedOut(
        bid=_bid_to_out(bid),
        auto_bid=_bid_to_out(auto_bid) if auto_bid else None,
    )


@app.post("/api/auctions/{auction_id}/players/{player_id}/close", response_model=AllocationOut)
def close_player_bidding(
    auction_id: str,
    player_id: str,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> AllocationOut:
    require_role(principal, "admin")
    with store.player_lock(auction_id, player_id):
        player, team = close_player(db, auction_id, player_id)
    return AllocationOut(player=_player_to_out(player), team=_team_to_out(team))


# --- Auto-bid configs --------------------------------------------------------


@app.get("/api/auctions/{auction_id}/autobids", response_model=list[AutoBidConfigOut])
def list_auto_bids(auction_id: str, db: Session = Depends(get_db)) -> list[AutoBidConfigOut]:
    configs = db.scalars(
        select(AutoBidConfig).where(AutoBidConfig.auction_id == auction_id)
    ).all()
    return [_auto_bid_to_out(config_row) for config_row in configs]


@app.post(
    "/api/auctions/{auction_id}/autobids",
    response_model=AutoBidConfigOut,
    status_code=status.HTTP_201_CREATED,
)
def create_auto_bid(
    auction_id: str,
    payload: AutoBidConfigRequest,
    db: Session = Depends(get_db),
) -> AutoBidConfigOut:
    auction = _get_auction(db, auction_id)
    if not db.get(Player, payload.player_id):
        raise NotFoundError("Player not found")
    if not db.get(Team, payload.team_id):
        raise NotFoundError("Team not found")
    config_row = AutoBidConfig(
        id=str(uuid.uuid4()),
        auction_id=auction.id,
        player_id=payload.player_id,
        team_id=payload.team_id,
        max_amount=payload.max_amount,
        active=True,
    )
    db.add(config_row)
    db.commit()
    logger.info(
        "Auto-bid config %s: team %s up to %s on %s",
        config_row.id, config_row.team_id, config_row.max_amount, config_row.player_id,
    )
    return _auto_bid_to_out(config_row)


# --- Teams -------------------------------------------------------------------


@app.get("/api/teams", response_model=list[TeamOut])
def list_teams(db: Session = Depends(get_db)) -> list[TeamOut]:
    return [_team_to_out(team) for team in db.scalars(select(Team)).all()]


@app.get("/api/teams/{team_id}", response_model=TeamOut)
def get_team(team_id: str, db: Session = Depends(get_db)) -> TeamOut:
    team = db.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")
    return _team_to_out(team)


# --- Notifications -----------------------------------------------------------


@app.get("/api/notifications", response_model=list[NotificationOut])
def list_notifications(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> list[NotificationOut]:
    return [_notification_to_out(item) for item in notifications_for(db, principal.id)]


@app.post(
    "/api/notifications",
    response_model=NotificationOut,
    status_code=status.HTTP_201_CREATED,
)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> NotificationOut:
    require_role(principal, "admin")
    notification = notify(db, payload.user_id, payload.type, payload.title, payload.message)
    db.commit()
    return _notification_to_out(notification)


@app.patch("/api/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> NotificationOut:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.user_id not in ("all", principal.id) and not principal.is_admin:
        raise Forbidden("Forbidden")
    notification.read = True
    db.commit()
    return _notification_to_out(notification)


# --- Insights ----------------------------------------------------------------


@app.get("/api/how-it-works", response_model=list[TimelineStageStamped])
def how_it_works() -> list[TimelineStageStamped]:
    now = datetime.utcnow()
    return [TimelineStageStamped(**stage, timestamp=now) for stage in base_timeline()]


@app.get("/api/analytics/summary", response_model=AnalyticsSummaryOut)
def analytics_summary(db: Session = Depends(get_db)) -> AnalyticsSummaryOut:
    players = db.scalars(select(Player)).all()
    teams = db.scalars(select(Team)).all()
    sold = [player for player in players if player.sold_price]
    gross_spend = sum(team.budget - team.remaining_budget for team in teams)
    average = round(sum(player.sold_price for player in sold) / len(sold)) if sold else 0
    live = db.scalars(
        select(Auction).where(Auction.status == AuctionStatus.LIVE.value).order_by(Auction.created_at)
    ).first()
    return AnalyticsSummaryOut(
        total_players=len(players),
        sold_players=len(sold),
        gross_spend=gross_spend,
        average_sell_price=average,
        live_auction_id=live.id if live else None,
    )
