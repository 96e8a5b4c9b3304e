"""Tests for chat polling and deduplication."""

import asyncio

import pytest

from ytlivechat.chat.exceptions import RequestFailedError
from ytlivechat.chat.poller import ChatPoller

from conftest import FakeDataAPI, make_message, wait_until


def make_poller(api, recorder):
    return ChatPoller(
        api=api,
        chat_id="chat1",
        on_message=recorder.on_message,
        on_error=recorder.on_error,
    )


@pytest.mark.asyncio
class TestFetch:
    async def test_increasing_timestamps_emitted_once_in_order(self, recorder):
        api = FakeDataAPI(
            pages=[
                [make_message("a", 1), make_message("b", 2)],
                [make_message("c", 3), make_message("d", 4)],
            ]
        )
        poller = make_poller(api, recorder)

        await poller.fetch()
        await poller.fetch()

        assert recorder.ids == ["a", "b", "c", "d"]
        assert poller.watermark == make_message("d", 4).published_at

    async def test_repeated_page_not_reemitted(self, recorder):
        page = [make_message("a", 1), make_message("b", 2)]
        api = FakeDataAPI(pages=[page, page, page + [make_message("c", 3)]])
        poller = make_poller(api, recorder)

        await poller.fetch()
        await poller.fetch()
        await poller.fetch()

        assert recorder.ids == ["a", "b", "c"]

    async def test_equal_timestamp_is_not_new(self, recorder):
        api = FakeDataAPI(
            pages=[[make_message("a", 1)], [make_message("a2", 1), make_message("b", 2)]]
        )
        poller = make_poller(api, recorder)

        await poller.fetch()
        await poller.fetch()

        assert recorder.ids == ["a", "b"]

    async def test_out_of_order_item_skipped(self, recorder):
        """Items older than an earlier item in the same page are dropped."""
        api = FakeDataAPI(
            pages=[[make_message("a", 1), make_message("c", 3), make_message("b", 2)]]
        )
        poller = make_poller(api, recorder)

        await poller.fetch()

        assert recorder.ids == ["a", "c"]
        assert poller.watermark == make_message("c", 3).published_at

    async def test_backlog_suppressed_but_watermark_advances(self, recorder):
        api = FakeDataAPI(
            pages=[
                [make_message("a", 1), make_message("b", 2)],
                [make_message("a", 1), make_message("b", 2), make_message("c", 3)],
            ]
        )
        poller = make_poller(api, recorder)
        poller.ignore_backlog = True

        await poller.fetch()

        assert recorder.ids == []
        assert poller.watermark == make_message("b", 2).published_at
        assert poller.ignore_backlog is False

        await poller.fetch()

        assert recorder.ids == ["c"]

    async def test_backlog_flag_cleared_by_empty_first_fetch(self, recorder):
        api = FakeDataAPI(pages=[[], [make_message("a", 1)]])
        poller = make_poller(api, recorder)
        poller.ignore_backlog = True

        await poller.fetch()
        await poller.fetch()

        assert recorder.ids == ["a"]

    async def test_failure_reported_and_not_fatal(self, recorder):
        error = RequestFailedError("HTTP 500", status=500)
        api = FakeDataAPI(pages=[error, [make_message("a", 1)]])
        poller = make_poller(api, recorder)

        assert await poller.fetch() is False
        assert await poller.fetch() is True

        assert recorder.errors == [error]
        assert recorder.ids == ["a"]
        assert poller.total_fetches == 2
        assert poller.total_errors == 1

    async def test_failed_first_fetch_keeps_backlog_suppression(self, recorder):
        api = FakeDataAPI(pages=[RequestFailedError("boom"), [make_message("a", 1)]])
        poller = make_poller(api, recorder)
        poller.ignore_backlog = True

        await poller.fetch()
        await poller.fetch()

        assert recorder.ids == []
        assert poller.ignore_backlog is False


@pytest.mark.asyncio
class TestSchedule:
    async def test_first_fetch_is_immediate(self, recorder):
        api = FakeDataAPI(pages=[[make_message("a", 1)]])
        poller = make_poller(api, recorder)

        poller.start(interval=60)
        await wait_until(lambda: api.fetch_count == 1)
        await poller.drain()

        assert recorder.ids == ["a"]
        assert poller.running
        poller.stop()

    async def test_fetches_repeat_until_stopped(self, recorder):
        api = FakeDataAPI()
        poller = make_poller(api, recorder)

        poller.start(interval=0.01)
        await wait_until(lambda: api.fetch_count >= 3)
        poller.stop()
        await poller.drain()
        count = api.fetch_count

        await asyncio.sleep(0.05)

        assert not poller.running
        assert api.fetch_count == count

    async def test_schedule_survives_errors(self, recorder):
        api = FakeDataAPI(
            pages=[RequestFailedError("one"), RequestFailedError("two"), [make_message("a", 1)]]
        )
        poller = make_poller(api, recorder)

        poller.start(interval=0.01)
        await wait_until(lambda: recorder.ids == ["a"])
        poller.stop()

        assert len(recorder.errors) == 2

    async def test_ignore_backlog_via_start(self, recorder):
        api = FakeDataAPI(
            pages=[[make_message("old", 1)], [make_message("old", 1), make_message("new", 2)]]
        )
        poller = make_poller(api, recorder)

        poller.start(interval=0.01, ignore_backlog=True)
        await wait_until(lambda: recorder.ids == ["new"])
        poller.stop()

    async def test_stop_then_start_keeps_watermark(self, recorder):
        api = FakeDataAPI(
            pages=[
                [make_message("a", 1), make_message("b", 2)],
                [make_message("a", 1), make_message("b", 2), make_message("c", 3)],
            ]
        )
        poller = make_poller(api, recorder)

        poller.start(interval=60)
        await wait_until(lambda: api.fetch_count == 1)
        await poller.drain()
        poller.stop()
        poller.start(interval=60)
        await wait_until(lambda: api.fetch_count == 2)
        await poller.drain()
        poller.stop()

        assert recorder.ids == ["a", "b", "c"]

    async def test_resume_uses_previous_interval(self, recorder):
        api = FakeDataAPI(pages=[[make_message("a", 1)], [make_message("a", 1)]])
        poller = make_poller(api, recorder)

        poller.start(interval=60, ignore_backlog=True)
        await wait_until(lambda: api.fetch_count == 1)
        poller.stop()
        poller.resume()
        await wait_until(lambda: api.fetch_count == 2)
        await poller.drain()
        poller.stop()

        assert recorder.ids == []
        assert poller.watermark == make_message("a", 1).published_at

    async def test_resume_before_start_raises(self, recorder):
        poller = make_poller(FakeDataAPI(), recorder)

        with pytest.raises(RuntimeError):
            poller.resume()

    async def test_start_twice_is_noop(self, recorder):
        api = FakeDataAPI()
        poller = make_poller(api, recorder)

        poller.start(interval=60)
        poller.start(interval=60)
        await wait_until(lambda: api.fetch_count == 1)
        await asyncio.sleep(0.02)
        poller.stop()

        assert api.fetch_count == 1

    async def test_invalid_interval(self, recorder):
        poller = make_poller(FakeDataAPI(), recorder)

        with pytest.raises(ValueError):
            poller.start(interval=0)

    async def test_stop_does_not_cancel_in_flight_fetch(self, recorder):
        release = asyncio.Event()
        api = FakeDataAPI(pages=[[make_message("a", 1)]])
        original = api.list_chat_messages

        async def slow_list(chat_id):
            await release.wait()
            return await original(chat_id)

        api.list_chat_messages = slow_list
        poller = make_poller(api, recorder)

        poller.start(interval=60)
        await wait_until(lambda: poller.in_flight == 1)
        poller.stop()
        release.set()
        await poller.drain()

        assert recorder.ids == ["a"]

    async def test_resume_during_first_fetch_keeps_backlog_suppressed(self, recorder):
        release = asyncio.Event()
        api = FakeDataAPI(pages=[[make_message("old", 1)], [make_message("old", 1)]])
        original = api.list_chat_messages

        async def gated_list(chat_id):
            await release.wait()
            return await original(chat_id)

        api.list_chat_messages = gated_list
        poller = make_poller(api, recorder)

        poller.start(interval=60, ignore_backlog=True)
        await wait_until(lambda: poller.in_flight == 1)
        poller.stop()
        poller.resume()
        await wait_until(lambda: poller.in_flight == 2)
        release.set()
        await poller.drain()
        poller.stop()

        assert recorder.ids == []
        assert poller.watermark == make_message("old", 1).published_at
        assert poller.ignore_backlog is False

    async def test_ticks_overlap_slow_fetches(self, recorder):
        release = asyncio.Event()
        page = [make_message("a", 1), make_message("b", 2)]
        api = FakeDataAPI(pages=[[make_message("a", 1)], page, page])
        original = api.list_chat_messages
        calls = []

        async def slow_list(chat_id):
            calls.append(chat_id)
            if len(calls) in (2, 3):
                await release.wait()
            return await original(chat_id)

        api.list_chat_messages = slow_list
        poller = make_poller(api, recorder)

        poller.start(interval=0.01)
        await wait_until(lambda: recorder.ids == ["a"])
        await wait_until(lambda: poller.in_flight >= 2)
        release.set()
        await wait_until(lambda: api.fetch_count >= 3)
        poller.stop()
        await poller.drain()

        assert recorder.ids == ["a", "b"]
        assert poller.watermark == make_message("b", 2).published_at
