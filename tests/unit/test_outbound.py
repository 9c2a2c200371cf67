"""Unit tests for OutboundChannel."""

import asyncio

import pytest

from sigrelay.ws.outbound import OutboundChannel


@pytest.mark.unit
class TestOutboundChannel:
    """Test cases for OutboundChannel."""

    @pytest.mark.asyncio
    async def test_frames_are_sent_in_order(self, make_ws):
        ws = make_ws()
        channel = OutboundChannel(ws, name="test")
        channel.start()

        for i in range(5):
            assert channel.offer(f"frame-{i}")
        await channel.drain()

        assert ws.sent == [f"frame-{i}" for i in range(5)]
        assert channel.sent == 5
        await channel.close()

    @pytest.mark.asyncio
    async def test_full_queue_drops_instead_of_waiting(self, make_ws):
        ws = make_ws()
        channel = OutboundChannel(ws, maxsize=2, name="slow")
        # Writer not started: nothing drains the queue

        assert channel.offer("a")
        assert channel.offer("b")
        assert not channel.offer("c")
        assert channel.dropped == 1
        await channel.close()

    @pytest.mark.asyncio
    async def test_send_failure_does_not_stop_writer(self, make_ws):
        ws = make_ws()
        calls = []

        async def flaky_send(frame):
            calls.append(frame)
            if frame == "boom":
                raise ConnectionResetError("peer went away")

        ws.send.side_effect = flaky_send
        channel = OutboundChannel(ws, name="flaky")
        channel.start()

        channel.offer("boom")
        channel.offer("after")
        await channel.drain()

        assert calls == ["boom", "after"]
        assert channel.sent == 1
        assert channel.dropped == 1
        await channel.close()

    @pytest.mark.asyncio
    async def test_closed_socket_frames_are_dropped(self, make_ws):
        ws = make_ws()
        ws.close_code = 1000
        channel = OutboundChannel(ws, name="gone")
        channel.start()

        channel.offer("late")
        await channel.drain()

        assert ws.sent == []
        assert channel.dropped == 1
        await channel.close()

    @pytest.mark.asyncio
    async def test_offer_after_close_is_rejected(self, make_ws):
        channel = OutboundChannel(make_ws(), name="closed")
        channel.start()
        await channel.close()

        assert channel.closed
        assert not channel.offer("frame")
        assert channel.queue.empty()

    @pytest.mark.asyncio
    async def test_slow_peer_does_not_block_others(self, make_ws):
        slow, fast = make_ws(), make_ws()
        release = asyncio.Event()

        async def stuck_send(frame):
            await release.wait()

        slow.send.side_effect = stuck_send
        slow_channel = OutboundChannel(slow, name="slow")
        fast_channel = OutboundChannel(fast, name="fast")
        slow_channel.start()
        fast_channel.start()

        slow_channel.offer("x")
        fast_channel.offer("x")
        await asyncio.wait_for(fast_channel.drain(), timeout=1.0)

        assert fast.sent == ["x"]
        release.set()
        await slow_channel.close()
        await fast_channel.close()
