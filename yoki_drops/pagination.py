"""Sequential paginated fetching with retry/backoff.

A source only has to implement ``fetch_page(resource, cursor) -> Page``.
Transfer sources also implement ``parse_event(item) -> TransferEvent``
and may set ``descending = True`` when the indexer returns newest first.
"""

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .config import BACKOFF_BASE, BACKOFF_CAP, MAX_ATTEMPTS, PAGE_DELAY
from .errors import MalformedEventError, MalformedResponseError, NetworkError


@dataclass
class Page:
    items: List[Any]
    next_cursor: Any = None
    # None: the indexer gives no flag, a short page marks the end.
    has_next: Optional[bool] = None


@dataclass
class FetchReport:
    events: list = field(default_factory=list)
    completed: list = field(default_factory=list)
    incomplete: list = field(default_factory=list)
    skipped_events: int = 0

    @property
    def is_complete(self):
        return not self.incomplete


def backoff_delay(attempt, base_delay=BACKOFF_BASE, max_delay=BACKOFF_CAP):
    """Delay before retry number ``attempt`` (1-based): 1, 2, 4, 8, ... capped."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def call_with_retry(request, max_attempts=MAX_ATTEMPTS, base_delay=BACKOFF_BASE,
                    max_delay=BACKOFF_CAP, sleep=time.sleep, label="request"):
    """Call ``request()`` until it succeeds or ``max_attempts`` NetworkErrors in a row."""
    for attempt in range(1, max_attempts + 1):
        try:
            return request()
        except NetworkError as e:
            if attempt == max_attempts:
                print(f"   ❌ {label}: giving up after {attempt} attempts ({e})")
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            print(f"   ⚠️ {label}: {e}. Retrying in {delay:g}s ({attempt}/{max_attempts})...")
            sleep(delay)


def _is_last_page(page, page_size):
    if page.has_next is False:
        return True
    if page_size and len(page.items) < page_size:
        return True
    if page.has_next is None and not page_size:
        return page.next_cursor is None
    return False


def iter_pages(source, resource, page_delay=PAGE_DELAY, max_attempts=MAX_ATTEMPTS,
               base_delay=BACKOFF_BASE, max_delay=BACKOFF_CAP, sleep=time.sleep):
    """Yield the items of every page for ``resource``, one page at a time."""
    page_size = getattr(source, "page_size", None)
    cursor = None
    page_number = 0

    while True:
        page_number += 1
        page = call_with_retry(
            lambda: source.fetch_page(resource, cursor),
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            sleep=sleep,
            label=f"{resource} page {page_number}",
        )
        yield page.items

        if _is_last_page(page, page_size):
            return
        if page.next_cursor is None or page.next_cursor in ("", {}):
            # Refetching with no cursor would loop on the first page.
            raise MalformedResponseError(f"{resource} page {page_number} has more data but no cursor")
        cursor = page.next_cursor
        sleep(page_delay)


def collect_transfers(source, resources, page_delay=PAGE_DELAY, max_attempts=MAX_ATTEMPTS,
                      base_delay=BACKOFF_BASE, max_delay=BACKOFF_CAP, sleep=time.sleep):
    """Fetch and normalize transfers for each resource (usually one per token id).

    A resource that cannot be fetched completely contributes no events at
    all and is listed in ``report.incomplete``.
    """
    report = FetchReport()
    descending = getattr(source, "descending", False)

    for resource in resources:
        print(f"🔎 Fetching transfers for {resource}...")
        events = []
        skipped = 0
        try:
            for items in iter_pages(source, resource, page_delay=page_delay,
                                    max_attempts=max_attempts, base_delay=base_delay,
                                    max_delay=max_delay, sleep=sleep):
                for item in items:
                    try:
                        events.append(source.parse_event(item))
                    except MalformedEventError as e:
                        skipped += 1
                        print(f"   ⚠️ Skipping event for {resource}: {e}")
                print(f"   Fetched {len(items)} transfers. Total for {resource}: {len(events)}")
        except (NetworkError, MalformedResponseError) as e:
            print(f"   ❌ {resource} incomplete, dropping its {len(events)} fetched transfers: {e}")
            report.incomplete.append(resource)
            continue

        if descending:
            events.reverse()
        report.events.extend(events)
        report.skipped_events += skipped
        report.completed.append(resource)
        print(f"   ✅ Completed {resource}: {len(events)} transfers")

    if report.incomplete:
        print(f"⚠️ Incomplete data for {len(report.incomplete)} resource(s): {report.incomplete}")
    return report


def collect_rows(source, resource, page_delay=PAGE_DELAY, max_attempts=MAX_ATTEMPTS,
                 base_delay=BACKOFF_BASE, max_delay=BACKOFF_CAP, sleep=time.sleep):
    """All rows for a non-transfer feed. Errors propagate to the caller."""
    rows = []
    for page_number, items in enumerate(
        iter_pages(source, resource, page_delay=page_delay, max_attempts=max_attempts,
                   base_delay=base_delay, max_delay=max_delay, sleep=sleep),
        start=1,
    ):
        rows.extend(items)
        print(f"   Page {page_number}: {len(items)} rows (total {len(rows)})")
    return rows
