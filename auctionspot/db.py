from __future__ import annotations

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")
SQLITE_BUSY_TIMEOUT = 30  # seconds a writer waits for another writer's commit


class Base(DeclarativeBase):
    pass


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        )
    return create_engine(url)


class Store:
    """Process-wide catalog of players, teams, auctions, bids and the rest.

    Built once at startup and handed to request handlers through
    ``get_store``/``get_db``. An in-memory URL is backed by a throwaway file
    that lives as long as the store, so every session gets its own connection
    to the same database.
    """

    def __init__(self, url: str) -> None:
        self._tempdir: tempfile.TemporaryDirectory | None = None
        if url in MEMORY_URLS:
            self._tempdir = tempfile.TemporaryDirectory(prefix="auctionspot-")
            url = f"sqlite:///{os.path.join(self._tempdir.name, 'auctionspot.db')}"
        self.url = url
        self.engine = build_engine(url)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def create_all(self) -> None:
        # Models register themselves on Base.metadata at import.
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Store ready at %s", self.url)

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def player_lock(self, auction_id: str, player_id: str) -> Iterator[None]:
        """Serialize bidding and closing for one player of one auction."""
        key = (auction_id, player_id)
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield

    def release_locks(self, auction_id: str) -> None:
        """Forget the player locks of an auction that takes no more bids."""
        with self._locks_guard:
            for key in [key for key in self._locks if key[0] == auction_id]:
                del self._locks[key]

    def dispose(self) -> None:
        self.engine.dispose()
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_db(store: Store = Depends(get_store)):
    db = store.session()
    try:
        yield db
    finally:
        db.close()
