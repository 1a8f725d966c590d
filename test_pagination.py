"""Paginated fetch driver and retry tests."""

import pytest

from yoki_drops.config import ZERO_ADDRESS
from yoki_drops.errors import MalformedResponseError, NetworkError
from yoki_drops.events import TransferEvent
from yoki_drops.ledger import replay_transfers
from yoki_drops.pagination import (
    Page,
    backoff_delay,
    call_with_retry,
    collect_rows,
    collect_transfers,
    iter_pages,
)
from yoki_drops.sources import BlockscoutGraphQLSource


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def raw(sender, receiver, token_id, value=1, ts=1000):
    return {"from": sender, "to": receiver, "token_id": token_id, "value": value, "ts": ts}


class FakeSource:
    """Serves pre-baked pages per resource; a list entry that is an exception is raised."""

    page_size = None
    descending = False

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def fetch_page(self, resource, cursor):
        self.calls.append((resource, cursor))
        step = self.pages[resource]
        index = cursor or 0
        result = step[index] if index < len(step) else step[-1]
        if isinstance(result, Exception):
            raise result
        items, has_next = result
        return Page(items=items, next_cursor=index + 1, has_next=has_next)

    @staticmethod
    def parse_event(item):
        return TransferEvent.create(item["from"], item["to"], item["token_id"], item["value"], item["ts"])


def test_backoff_schedule():
    print("=== Backoff schedule ===")
    assert [backoff_delay(n) for n in range(1, 7)] == [1, 2, 4, 8, 15, 15]
    print("  1, 2, 4, 8, capped at 15: OK")


def test_call_with_retry_gives_up_after_bound():
    print("=== Retry bound ===")
    sleep = SleepRecorder()
    attempts = []

    def failing():
        attempts.append(1)
        raise NetworkError("boom")

    with pytest.raises(NetworkError):
        call_with_retry(failing, max_attempts=5, sleep=sleep)
    assert len(attempts) == 5
    assert sleep.calls == [1, 2, 4, 8]
    print(f"  {len(attempts)} attempts, sleeps {sleep.calls}: OK")


def test_call_with_retry_recovers():
    sleep = SleepRecorder()
    outcomes = [NetworkError("once"), "ok"]

    def flaky():
        result = outcomes.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    assert call_with_retry(flaky, sleep=sleep) == "ok"
    assert sleep.calls == [1]


def test_call_with_retry_does_not_retry_other_errors():
    sleep = SleepRecorder()

    def broken():
        raise MalformedResponseError("bad shape")

    with pytest.raises(MalformedResponseError):
        call_with_retry(broken, sleep=sleep)
    assert sleep.calls == []


def test_iter_pages_stops_on_has_next_false():
    print("=== has_next termination ===")
    source = FakeSource({"100": [([1, 2], True), ([3, 4], True), ([5, 6], False)]})
    pages = list(iter_pages(source, "100", page_delay=0.05, sleep=SleepRecorder()))
    assert pages == [[1, 2], [3, 4], [5, 6]]
    assert len(source.calls) == 3
    print("  3 pages: OK")


def test_iter_pages_stops_on_short_page():
    print("=== Short page termination ===")
    source = FakeSource({"feed": [([1, 2], None), ([3, 4], None), ([5], None)]})
    source.page_size = 2
    pages = list(iter_pages(source, "feed", sleep=SleepRecorder()))
    assert pages == [[1, 2], [3, 4], [5]]
    print("  stopped after the short page: OK")


def test_iter_pages_short_page_wins_over_has_next():
    source = FakeSource({"feed": [([1], True), ([2, 3], True)]})
    source.page_size = 2
    assert list(iter_pages(source, "feed", sleep=SleepRecorder())) == [[1]]


def test_iter_pages_politeness_delay_between_pages():
    sleep = SleepRecorder()
    source = FakeSource({"100": [([1], True), ([2], False)]})
    list(iter_pages(source, "100", page_delay=0.1, sleep=sleep))
    assert sleep.calls == [0.1]


def test_successful_page_resets_retry_counter():
    print("=== Retry counter reset ===")
    sleep = SleepRecorder()
    remaining_failures = {0: 4, 1: 4, 2: 4}

    class Flaky(FakeSource):
        def fetch_page(self, resource, cursor):
            index = cursor or 0
            if remaining_failures[index] > 0:
                remaining_failures[index] -= 1
                raise NetworkError("flaky")
            return super().fetch_page(resource, cursor)

    source = Flaky({"100": [([1], True), ([2], True), ([3], False)]})
    pages = list(iter_pages(source, "100", page_delay=0, sleep=sleep))
    # Four failures per page stay under the bound of five attempts.
    assert pages == [[1], [2], [3]]
    print("  4 failures on each page tolerated: OK")


def test_collect_transfers_abandons_failing_token():
    print("=== Abandon token after retries ===")
    source = FakeSource({
        "100": [([raw(ZERO_ADDRESS, "0xabc", 100)], False)],
        "101": [NetworkError("503")],
        "200": [([raw(ZERO_ADDRESS, "0xabc", 200)], False)],
    })
    sleep = SleepRecorder()
    report = collect_transfers(source, ["100", "101", "200"], sleep=sleep)

    assert report.completed == ["100", "200"]
    assert report.incomplete == ["101"]
    assert not report.is_complete
    assert [e.token_id for e in report.events] == ["100", "200"]
    assert len([c for c in source.calls if c[0] == "101"]) == 5
    print(f"  incomplete={report.incomplete}: OK")


def test_collect_transfers_drops_partial_token():
    source = FakeSource({
        "100": [([raw(ZERO_ADDRESS, "0xabc", 100)], True), NetworkError("timeout")],
    })
    report = collect_transfers(source, ["100"], sleep=SleepRecorder())
    assert report.incomplete == ["100"]
    assert report.events == []


def test_collect_transfers_malformed_response_marks_incomplete():
    source = FakeSource({"100": [MalformedResponseError("no items")]})
    sleep = SleepRecorder()
    report = collect_transfers(source, ["100"], sleep=sleep)
    assert report.incomplete == ["100"]
    assert sleep.calls == []


def test_collect_transfers_skips_malformed_events():
    print("=== Malformed event skipped ===")
    source = FakeSource({
        "100": [([raw(ZERO_ADDRESS, "0xabc", 100, value="lots"), raw(ZERO_ADDRESS, "0xdef", 100)], False)],
    })
    report = collect_transfers(source, ["100"], sleep=SleepRecorder())
    assert report.skipped_events == 1
    assert report.completed == ["100"]
    assert [e.to_address for e in report.events] == ["0xdef"]
    print("  1 skipped, 1 kept: OK")


def test_collect_transfers_reverses_descending_sources():
    print("=== Newest-first sources ===")
    newest_first = [
        raw("0xabc", "0xdef", 100, ts=2000),
        raw(ZERO_ADDRESS, "0xabc", 100, ts=1000),
    ]
    source = FakeSource({"100": [(newest_first, False)]})
    source.descending = True
    report = collect_transfers(source, ["100"], sleep=SleepRecorder())
    assert [e.timestamp_ms for e in report.events] == [1000, 2000]

    ledger = replay_transfers(report.events)
    assert ledger.snapshot() == {"0xdef": {"100": 1}}
    print("  replayed oldest first: OK")


class CursorlessSource(FakeSource):
    """Claims more pages but hands back ``cursor`` instead of a usable one."""

    def __init__(self, pages, cursor):
        super().__init__(pages)
        self.cursor = cursor

    def fetch_page(self, resource, cursor):
        page = super().fetch_page(resource, cursor)
        page.next_cursor = self.cursor
        return page


def test_iter_pages_rejects_missing_cursor():
    print("=== has_next without a cursor ===")
    for cursor in (None, "", {}):
        source = CursorlessSource({"100": [([1], True), ([2], False)]}, cursor)
        with pytest.raises(MalformedResponseError):
            list(iter_pages(source, "100", sleep=SleepRecorder()))
        assert len(source.calls) == 1
    print("  stops after one fetch instead of looping: OK")


def test_collect_transfers_marks_cursorless_token_incomplete():
    source = CursorlessSource({
        "100": [([raw(ZERO_ADDRESS, "0xabc", 100)], True)],
    }, None)
    report = collect_transfers(source, ["100"], sleep=SleepRecorder())
    assert report.incomplete == ["100"]
    assert report.events == []


def test_collect_transfers_skips_non_dict_nodes():
    print("=== Non-dict nodes skipped ===")
    valid = {
        "timestamp": "2025-05-10T00:00:00Z",
        "from": {"hash": ZERO_ADDRESS},
        "to": {"hash": "0xdef"},
        "tokenId": "100",
        "value": "1",
    }

    class GraphQLNodes(FakeSource):
        parse_event = staticmethod(BlockscoutGraphQLSource.parse_event)

    source = GraphQLNodes({
        "100": [([None, valid, "garbage", dict(valid, to="0xdef")], False)],
        "200": [([dict(valid, tokenId="200")], False)],
    })
    report = collect_transfers(source, ["100", "200"], sleep=SleepRecorder())
    assert report.completed == ["100", "200"]
    assert report.skipped_events == 3
    assert [e.token_id for e in report.events] == ["100", "200"]
    print(f"  {report.skipped_events} skipped, run continued: OK")


def test_collect_rows_propagates_errors():
    source = FakeSource({9: [NetworkError("down")]})
    with pytest.raises(NetworkError):
        collect_rows(source, 9, max_attempts=2, sleep=SleepRecorder())


def test_collect_rows_gathers_all_pages():
    source = FakeSource({9: [([{"address": "0x1"}], True), ([{"address": "0x2"}], False)]})
    rows = collect_rows(source, 9, sleep=SleepRecorder())
    assert [r["address"] for r in rows] == ["0x1", "0x2"]
