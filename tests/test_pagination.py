import asyncio
from types import SimpleNamespace

import pytest
from playwright.async_api import Error as PlaywrightError

from fabexport.dom import parse_html
from fabexport.scraper.events import EventExtractor
from fabexport.scraper.fetcher import GemFetcher
from fabexport.scraper.pagination import HistoryFetchError, HistoryPaginator, count_matches
from fabexport.scraper.session import GemSession
from tests.helpers import (
    FakeActiveView,
    FakeFetcher,
    FakeRequestContext,
    FakeResponse,
    event_html,
    history_page_html,
    player_page_html,
)


def _listing(total_pages):
    """One completed two-match event per history page."""
    return {
        n: history_page_html([event_html(f"evt-{n}", title=f"Armory Week {n}")], total_pages)
        for n in range(1, total_pages + 1)
    }


def _paginator(fetcher, active_view=None):
    return HistoryPaginator(fetcher, EventExtractor(fetcher), active_view=active_view)


def _run(paginator, max_pages=0):
    progress = []
    events = asyncio.run(paginator.fetch_all_pages(lambda *args: progress.append(args), max_pages))
    return events, progress


def test_detect_total_pages():
    assert HistoryPaginator.detect_total_pages(parse_html(history_page_html([], 7))) == 7
    assert HistoryPaginator.detect_total_pages(parse_html("<html><body></body></html>")) == 1
    assert HistoryPaginator.detect_total_pages(parse_html('<a href="/profile/history/?page=12&amp;sort=date">Last</a>')) == 12


def test_fetches_all_pages_in_batches():
    fetcher = FakeFetcher(history_pages=_listing(5))
    events, progress = _run(_paginator(fetcher))

    assert [e.event_id for e in events] == ["evt-1", "evt-2", "evt-3", "evt-4", "evt-5"]
    assert progress == [(1, 5, 2), (4, 5, 8), (5, 5, 10)]
    assert fetcher.history_calls == [1, 2, 3, 4, 5]


def test_single_page_history():
    fetcher = FakeFetcher(history_pages=_listing(1))
    events, progress = _run(_paginator(fetcher))

    assert len(events) == 1
    assert progress == [(1, 1, 2)]


def test_page_budget_caps_listing():
    fetcher = FakeFetcher(history_pages=_listing(5))
    events, progress = _run(_paginator(fetcher), max_pages=2)

    assert [e.event_id for e in events] == ["evt-1", "evt-2"]
    assert progress == [(1, 2, 2), (2, 2, 4)]
    assert fetcher.history_calls == [1, 2]


def test_budget_larger_than_listing():
    fetcher = FakeFetcher(history_pages=_listing(2))
    events, _ = _run(_paginator(fetcher), max_pages=4)
    assert len(events) == 2


def test_failed_page_in_batch_retried_sequentially_and_dropped():
    fetcher = FakeFetcher(history_pages=_listing(7), failing_pages=[6])
    events, progress = _run(_paginator(fetcher))

    assert [e.event_id for e in events] == ["evt-1", "evt-2", "evt-3", "evt-4", "evt-5", "evt-7"]
    assert progress[-1] == (7, 7, 12)
    assert fetcher.history_calls.count(2) == 1
    assert fetcher.history_calls.count(5) == 2
    assert fetcher.history_calls.count(6) == 2
    assert fetcher.history_calls.count(7) == 2


def test_flaky_page_recovered_by_sequential_retry():
    fetcher = FakeFetcher(history_pages=_listing(4), flaky_pages=[3])
    events, _ = _run(_paginator(fetcher))
    assert [e.event_id for e in events] == ["evt-1", "evt-2", "evt-3", "evt-4"]


def test_first_page_failure_raises():
    fetcher = FakeFetcher(history_pages=_listing(3), failing_pages=[1])

    with pytest.raises(HistoryFetchError, match="Page 1: HTTP 500"):
        _run(_paginator(fetcher))
    assert fetcher.history_calls == [1]


def test_active_view_reused_for_first_page():
    pages = _listing(2)
    fetcher = FakeFetcher(history_pages=pages)
    view = FakeActiveView(history_page_one=pages[1])
    events, _ = _run(_paginator(fetcher, view))

    assert len(events) == 2
    assert fetcher.history_calls == [2]


def test_active_view_on_other_page_falls_back_to_fetch():
    fetcher = FakeFetcher(history_pages=_listing(1))
    _run(_paginator(fetcher, FakeActiveView()))
    assert fetcher.history_calls == [1]


def test_player_page_events_merged_without_duplicates():
    fetcher = FakeFetcher(
        history_pages=_listing(2),
        player_page=player_page_html([
            event_html("evt-2"),
            event_html("player-1", title="Skirmish"),
            event_html("player-1", title="Skirmish (again)"),
        ]),
    )
    events, progress = _run(_paginator(fetcher))

    assert [e.event_id for e in events] == ["evt-1", "evt-2", "player-1"]
    assert events[2].name == "Skirmish"
    # Progress covers the listing only
    assert progress[-1] == (2, 2, 4)


def test_events_without_id_deduplicated_on_player_page():
    fetcher = FakeFetcher(
        history_pages=_listing(1),
        player_page=player_page_html([event_html(""), event_html("")]),
    )
    events, _ = _run(_paginator(fetcher))
    assert [e.event_id for e in events] == ["evt-1", ""]


def test_player_page_from_active_view():
    fetcher = FakeFetcher(history_pages=_listing(1))
    view = FakeActiveView(player_page=player_page_html([event_html("player-1")]))
    events, _ = _run(_paginator(fetcher, view))

    assert [e.event_id for e in events] == ["evt-1", "player-1"]
    assert fetcher.player_calls == 0


def test_player_page_failure_keeps_listing():
    fetcher = FakeFetcher(history_pages=_listing(2))
    events, _ = _run(_paginator(fetcher))

    assert len(events) == 2
    assert fetcher.player_calls == 1


def test_count_matches():
    fetcher = FakeFetcher(history_pages=_listing(3))
    events, _ = _run(_paginator(fetcher))
    assert count_matches(events) == 6
    assert count_matches([]) == 0


def test_batch_keeps_neighbours_of_failed_page():
    fetcher = FakeFetcher(history_pages=_listing(6), failing_pages=[5])
    documents = asyncio.run(_paginator(fetcher)._fetch_batch([4, 5, 6]))

    ids = [d.select_one("div.event")["id"] for d in documents]
    assert ids == ["evt-4", "evt-6"]
    assert fetcher.history_calls == [4, 5, 6, 4, 5, 6]


def test_unreadable_body_recovered_by_sequential_retry():
    pages = _listing(3)
    url = "https://gem.example/profile/history/?page={}".format
    unreadable = FakeResponse(text_error=PlaywrightError("Response body is unavailable"))
    request = FakeRequestContext(
        response=FakeResponse(status=404),
        responses={
            url(1): [FakeResponse(body=pages[1])],
            url(2): [unreadable, FakeResponse(body=pages[2])],
            url(3): [FakeResponse(body=pages[3])],
        },
    )
    fetcher = GemFetcher(request, origin="https://gem.example")
    events, progress = _run(_paginator(fetcher))

    assert [e.event_id for e in events] == ["evt-1", "evt-2", "evt-3"]
    assert progress[-1] == (3, 3, 6)
    assert request.urls.count(url(2)) == 2
    assert all(response.disposed for response in request.served)


def test_unreadable_active_tab_falls_back_to_fetch():
    pages = _listing(1)
    session = GemSession(storage_state_path=None, origin="https://gem.example")
    session.page = SimpleNamespace(url="https://gem.example/profile/history/", content=_raise_navigation)
    fetcher = FakeFetcher(history_pages=pages, player_page=player_page_html([event_html("player-1")]))

    events, _ = _run(_paginator(fetcher, session))

    assert [e.event_id for e in events] == ["evt-1", "player-1"]
    assert fetcher.history_calls == [1]


async def _raise_navigation():
    raise PlaywrightError("Execution context was destroyed")
