# =======================================================================================
# campus_access/client/history.py - Access History View Model
# =======================================================================================
import logging
import math
import random
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Protocol
from ..config import config
from ..models.enums import EVENT_KINDS, KindFilter
from ..utils.exceptions import ApiError
from .gateway import ApiGateway

logger = logging.getLogger("campus_access.client.history")

MOCK_LOCATIONS = ("Building A", "Building B", "Building C", "Library", "Gym")
MOCK_STATUSES = ("success", "error")


@dataclass(frozen=True)
class HistoryFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    kind: KindFilter = "all"

    @classmethod
    def last_week(cls, today: Optional[date] = None) -> "HistoryFilter":
        today = today or date.today()
        return cls(start_date=today - timedelta(days=7), end_date=today, kind="all")


@dataclass(frozen=True)
class HistoryEvent:
    id: int
    occurred_at: datetime
    kind: str
    location: Optional[str] = None
    status: str = "success"


@dataclass
class HistoryPage:
    items: List[HistoryEvent]
    total: int


def matches(event: HistoryEvent, flt: HistoryFilter) -> bool:
    """Inclusive date bounds; kind 'all' matches everything."""
    day = event.occurred_at.date()
    if flt.start_date and day < flt.start_date:
        return False
    if flt.end_date and day > flt.end_date:
        return False
    return flt.kind == "all" or event.kind == flt.kind


def total_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size))


class HistorySource(Protocol):
    async def fetch(self, page: int, page_size: int, flt: HistoryFilter) -> HistoryPage:
        ...


class MockHistorySource:
    """Random events over the last 60 days."""

    def __init__(self, count: int = 50, seed: Optional[int] = None, now: Optional[datetime] = None):
        rng = random.Random(seed)
        now = now or datetime.now()
        self.events: List[HistoryEvent] = []
        for i in range(count):
            occurred = (now - timedelta(days=rng.randrange(60))).replace(
                hour=rng.randrange(24), minute=rng.randrange(60), second=0, microsecond=0
            )
            self.events.append(HistoryEvent(
                id=i + 1,
                occurred_at=occurred,
                kind=rng.choice(EVENT_KINDS),
                location=rng.choice(MOCK_LOCATIONS),
                status=rng.choice(MOCK_STATUSES),
            ))

    async def fetch(self, page: int, page_size: int, flt: HistoryFilter) -> HistoryPage:
        filtered = [e for e in self.events if matches(e, flt)]
        start = (page - 1) * page_size
        return HistoryPage(items=filtered[start:start + page_size], total=len(filtered))


class GatewayHistorySource:
    """Events recorded by the backend, optionally for one barcode."""

    def __init__(self, gateway: ApiGateway, user_code: Optional[str] = None):
        self.gateway = gateway
        self.user_code = user_code

    async def fetch(self, page: int, page_size: int, flt: HistoryFilter) -> HistoryPage:
        result = await self.gateway.list_access_logs(
            page,
            page_size,
            start_date=flt.start_date,
            end_date=flt.end_date,
            kind=flt.kind,
            user_code=self.user_code,
        )
        items = [
            HistoryEvent(id=row.log_id, occurred_at=row.event_timestamp, kind=row.event_type)
            for row in result.data
        ]
        return HistoryPage(items=items, total=result.total)


@dataclass
class AccessHistoryViewModel:
    source: HistorySource
    page_size: int = config.HISTORY_PAGE_SIZE
    current_page: int = 1
    total_pages: int = 1
    filter: HistoryFilter = field(default_factory=HistoryFilter.last_week)
    items: List[HistoryEvent] = field(default_factory=list)
    total: int = 0
    loading: bool = False
    error: Optional[str] = None

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            page = await self.source.fetch(self.current_page, self.page_size, self.filter)
        except ApiError as e:
            logger.warning("Could not load access history: %s", e.message)
            self.error = e.message or "Error loading the access history."
            page = HistoryPage(items=[], total=0)
        finally:
            self.loading = False

        self.items = page.items
        self.total = page.total
        self.total_pages = total_pages(page.total, self.page_size)

    async def apply_filter(self, flt: HistoryFilter) -> None:
        self.filter = replace(flt)
        self.current_page = 1
        await self.load()

    async def reset_filter(self, today: Optional[date] = None) -> None:
        await self.apply_filter(HistoryFilter.last_week(today))

    async def change_page(self, delta: int) -> bool:
        """Move by delta pages; returns False (and does nothing) when out of range."""
        new_page = self.current_page + delta
        if new_page < 1 or new_page > self.total_pages:
            return False
        self.current_page = new_page
        await self.load()
        return True
