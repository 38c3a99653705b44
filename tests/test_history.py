import asyncio
from datetime import date, datetime

from campus_access.client.history import (
    AccessHistoryViewModel, HistoryEvent, HistoryFilter, HistoryPage, MockHistorySource,
    matches, total_pages,
)
from campus_access.utils.exceptions import TransportError


def _event(day: int, kind: str = "entry", hour: int = 12) -> HistoryEvent:
    return HistoryEvent(id=day, occurred_at=datetime(2026, 3, day, hour, 0), kind=kind)


class ListSource:
    def __init__(self, events):
        self.events = events
        self.calls = []

    async def fetch(self, page, page_size, flt):
        self.calls.append((page, flt))
        filtered = [e for e in self.events if matches(e, flt)]
        start = (page - 1) * page_size
        return HistoryPage(items=filtered[start:start + page_size], total=len(filtered))


class FailingSource:
    async def fetch(self, page, page_size, flt):
        raise TransportError("Network error or request failed", status=0)


def test_date_bounds_are_inclusive():
    flt = HistoryFilter(start_date=date(2026, 3, 2), end_date=date(2026, 3, 4))

    assert matches(_event(2, hour=0), flt)
    assert matches(_event(4, hour=23), flt)
    assert not matches(_event(1, hour=23), flt)
    assert not matches(_event(5, hour=0), flt)


def test_kind_all_is_wildcard():
    assert matches(_event(1, "exit"), HistoryFilter(kind="all"))
    assert matches(_event(1, "exit"), HistoryFilter(kind="exit"))
    assert not matches(_event(1, "exit"), HistoryFilter(kind="entry"))


def test_open_bounds_match_everything():
    assert matches(_event(1), HistoryFilter())


def test_total_pages_minimum_one():
    assert total_pages(0, 10) == 1
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_empty_result_has_one_page():
    view = AccessHistoryViewModel(ListSource([]), page_size=10)

    asyncio.run(view.apply_filter(HistoryFilter()))

    assert view.total_pages == 1
    assert view.items == []


def test_change_page_stays_in_range():
    source = ListSource([_event(d) for d in range(1, 26)])
    view = AccessHistoryViewModel(source, page_size=10)

    async def scenario():
        await view.apply_filter(HistoryFilter())
        moves = [
            await view.change_page(-1),
            await view.change_page(1),
            await view.change_page(1),
            await view.change_page(1),
            await view.change_page(5),
        ]
        return moves

    moves = asyncio.run(scenario())

    assert moves == [False, True, True, False, False]
    assert view.current_page == 3
    assert view.total_pages == 3
    assert len(view.items) == 5


def test_apply_filter_resets_to_first_page():
    source = ListSource([_event(d, "entry" if d % 2 else "exit") for d in range(1, 26)])
    view = AccessHistoryViewModel(source, page_size=5)

    async def scenario():
        await view.apply_filter(HistoryFilter())
        await view.change_page(2)
        await view.apply_filter(HistoryFilter(kind="exit"))

    asyncio.run(scenario())

    assert view.current_page == 1
    assert view.total == 12
    assert all(e.kind == "exit" for e in view.items)
    assert source.calls[-1][0] == 1


def test_reset_filter_uses_last_week():
    source = ListSource([])
    view = AccessHistoryViewModel(source)

    asyncio.run(view.reset_filter(today=date(2026, 3, 10)))

    assert view.filter == HistoryFilter(start_date=date(2026, 3, 3), end_date=date(2026, 3, 10), kind="all")


def test_source_failure_becomes_error_message():
    view = AccessHistoryViewModel(FailingSource())

    asyncio.run(view.load())

    assert view.error == "Network error or request failed"
    assert view.items == []
    assert view.total_pages == 1
    assert view.loading is False


def test_mock_source_is_reproducible_and_filterable():
    now = datetime(2026, 10, 19, 12, 0)
    a = MockHistorySource(seed=7, now=now)
    b = MockHistorySource(seed=7, now=now)

    assert a.events == b.events
    assert len(a.events) == 50

    page = asyncio.run(a.fetch(1, 10, HistoryFilter(kind="entry")))

    assert page.total == sum(1 for e in a.events if e.kind == "entry")
    assert len(page.items) == min(10, page.total)
    assert all(e.kind == "entry" for e in page.items)
