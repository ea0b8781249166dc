# tests/helpers.py

from typing import Dict, Iterable, List, Optional, Sequence

from fabexport.dom import parse_html
from fabexport.models import FetchResult

DEFAULT_HEADERS = ("Round", "Opponent", "Result")


def table_html(rows: Iterable[Sequence[str]], headers: Sequence[str] = DEFAULT_HEADERS, tbody: bool = True) -> str:
    head = "<tr>" + "".join(f"<th>{h}</th>" for h in headers) + "</tr>"
    body = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
    if tbody:
        return f"<table><thead>{head}</thead><tbody>{body}</tbody></table>"
    return f"<table>{head}{body}</table>"


def decklists_html(hero: str) -> str:
    return f'<h5>Decklists</h5><table><tr><td><a href="/decks/1">{hero}</a></td></tr></table>'


def event_html(
    event_id: str,
    title: str = "Armory Night",
    meta: Sequence[str] = ("Jan 5, 2024", "Armory", "Classic Constructed", "Rated", "Main St Games"),
    when: str = "",
    rows: Optional[Iterable[Sequence[str]]] = (("1", "Alice Smith (111)", "Win"), ("2", "Bob Jones (222)", "Loss")),
    hero: Optional[str] = "Dorinthea Ironsong",
    active: bool = False,
    report_href: Optional[str] = None,
    card_hero: Optional[str] = None,
) -> str:
    """A GEM `div.event` card; rows=None renders a card without inline details."""
    when_class = "event__when event__when--active" if active else "event__when"
    parts = [
        f'<div class="event" id="{event_id}">',
        f'<h4 class="event__title">{title}</h4>',
        f'<div class="{when_class}">{when}</div>',
        '<div class="event__meta">',
        "".join(f'<div class="event__meta-item"><span>{m}</span></div>' for m in meta),
        "</div>",
    ]
    if card_hero:
        parts.append(f'<div class="event__decklists"><a href="/decks/2">{card_hero}</a></div>')
    if report_href:
        parts.append(f'<a href="{report_href}">View Report</a>')
    if rows is not None:
        parts.append('<details class="event__extra-details"><summary>Details</summary>')
        parts.append(table_html(rows))
        if hero:
            parts.append(decklists_html(hero))
        parts.append("</details>")
    parts.append("</div>")
    return "".join(parts)


def history_page_html(events: Iterable[str], total_pages: int = 1) -> str:
    links = "".join(f'<a href="/profile/history/?page={n}">{n}</a>' for n in range(1, total_pages + 1))
    return f'<html><body><nav class="pagination">{links}</nav>{"".join(events)}</body></html>'


def player_page_html(events: Iterable[str] = (), gem_id: str = "12345678") -> str:
    return (
        "<html><body>"
        f'<div class="profile"><span>GEM ID:</span> <strong>{gem_id}</strong></div>'
        f'{"".join(events)}'
        "</body></html>"
    )


def report_page_html(rows: Iterable[Sequence[str]], hero: Optional[str] = None) -> str:
    return f"<html><body>{table_html(rows)}{decklists_html(hero) if hero else ''}</body></html>"


class FakeResponse:
    """Stand-in for Playwright's APIResponse."""

    def __init__(self, status: int = 200, body: str = "<html><body><p>ok</p></body></html>", text_error=None):
        self.status = status
        self.ok = 200 <= status < 300
        self.body = body
        self.text_error = text_error
        self.disposed = False

    async def text(self) -> str:
        if self.text_error is not None:
            raise self.text_error
        return self.body

    async def dispose(self) -> None:
        self.disposed = True


class FakeRequestContext:
    """
    Stand-in for Playwright's APIRequestContext.

    `responses` maps a URL to a queue of FakeResponses served in order (the
    last one repeats); other URLs get `response`, or raise `error` when set.
    """

    def __init__(self, response=None, error=None, responses: Optional[Dict[str, List[FakeResponse]]] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.responses = responses or {}
        self.urls: List[str] = []
        self.served: List[FakeResponse] = []

    async def get(self, url, timeout=None):
        self.urls.append(url)
        if url in self.responses:
            queue = self.responses[url]
            response = queue.pop(0) if len(queue) > 1 else queue[0]
        elif self.error:
            raise self.error
        else:
            response = self.response
        self.served.append(response)
        return response


class FakeFetcher:
    """In-memory stand-in for GemFetcher that records every request."""

    def __init__(
        self,
        history_pages: Optional[Dict[int, str]] = None,
        player_page: Optional[str] = None,
        reports: Optional[Dict[str, str]] = None,
        failing_pages: Iterable[int] = (),
        flaky_pages: Iterable[int] = (),
    ):
        self.history_pages = history_pages or {}
        self.player_page = player_page
        self.reports = reports or {}
        self.failing_pages = set(failing_pages)
        self.flaky_pages = set(flaky_pages)
        self.history_calls: List[int] = []
        self.player_calls = 0
        self.report_calls: List[str] = []

    async def fetch_history_page(self, page_num: int) -> FetchResult:
        url = f"/profile/history/?page={page_num}"
        first_attempt = page_num not in self.history_calls
        self.history_calls.append(page_num)
        if page_num in self.failing_pages or page_num not in self.history_pages:
            return FetchResult.failure(url, "HTTP 500", status=500)
        if page_num in self.flaky_pages and first_attempt:
            return FetchResult.failure(url, "connection reset")
        return FetchResult.success(url, parse_html(self.history_pages[page_num]))

    async def fetch_player_page(self) -> FetchResult:
        self.player_calls += 1
        if self.player_page is None:
            return FetchResult.failure("/profile/player/", "HTTP 503", status=503)
        return FetchResult.success("/profile/player/", parse_html(self.player_page))

    async def fetch_report_page(self, href: Optional[str]) -> FetchResult:
        self.report_calls.append(href)
        if href not in self.reports:
            return FetchResult.failure(href or "", "HTTP 404", status=404)
        return FetchResult.success(href, parse_html(self.reports[href]))


class FakeActiveView:
    def __init__(self, history_page_one: Optional[str] = None, player_page: Optional[str] = None):
        self.history_page_one = history_page_one
        self.player_page = player_page

    async def history_page_one_document(self):
        return parse_html(self.history_page_one) if self.history_page_one is not None else None

    async def player_page_document(self):
        return parse_html(self.player_page) if self.player_page is not None else None


class FakeHost:
    def __init__(self, clipboard_ok: bool = True):
        self.clipboard_ok = clipboard_ok
        self.clipboard: List[str] = []
        self.opened: List[str] = []

    async def write_clipboard(self, text: str) -> bool:
        if self.clipboard_ok:
            self.clipboard.append(text)
        return self.clipboard_ok

    async def open_url(self, url: str) -> None:
        self.opened.append(url)


class RecordingUI:
    def __init__(self, confirm: bool = True):
        self.confirm = confirm
        self.progress: List[tuple] = []
        self.errors: List[str] = []
        self.completions: List[object] = []
        self.quick_syncs: List[object] = []
        self.successes: List[str] = []

    def show_progress(self, status, detail, match_count=0, progress=None):
        self.progress.append((status, detail, match_count, progress))

    def show_completion(self, outcome):
        self.completions.append(outcome)

    def show_quick_sync_opened(self, outcome):
        self.quick_syncs.append(outcome)

    def confirm_download(self, filename):
        return self.confirm

    def show_error(self, message):
        self.errors.append(message)

    def show_success(self, message):
        self.successes.append(message)
