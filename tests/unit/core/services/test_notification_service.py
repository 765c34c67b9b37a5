"""Unit tests for the notification dispatcher."""

import asyncio
import uuid

import pytest

from collabnotes.config import Settings
from collabnotes.core.redis_client import RedisClient
from collabnotes.core.services.notification_service import NotificationDispatcher, NoteNotification


class FakeRedis:
    def __init__(self, fail_first: bool = False):
        self.published = []
        self.fail_first = fail_first

    async def publish(self, channel, payload):
        if self.fail_first:
            self.fail_first = False
            raise ConnectionError("redis went away")
        self.published.append((channel, payload))
        return 1


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def make_dispatcher():
    def _make(redis_client, **overrides):
        return NotificationDispatcher(redis_client=redis_client, settings=Settings(**overrides))

    return _make


class TestNotificationDispatcher:

    def test_channel_name(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis, notification_channel_prefix="notes")
        user_id = uuid.uuid4()
        assert dispatcher.channel_for(user_id) == f"notes:user:{user_id}"

    def test_dropped_when_not_running(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis)
        assert dispatcher.is_running is False
        assert dispatcher.notify(uuid.uuid4(), "hello", [uuid.uuid4()]) is False

    @pytest.mark.asyncio
    async def test_no_targets_after_exclusion(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis)
        await dispatcher.start()
        try:
            editor = uuid.uuid4()
            assert dispatcher.notify(uuid.uuid4(), "hi", [editor], exclude_user_id=editor) is False
        finally:
            await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_publishes_to_each_recipient_except_excluded(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis)
        owner, editor, reader = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        note_id = uuid.uuid4()

        await dispatcher.start()
        queued = dispatcher.notify(
            note_id, 'Note "Trip Plan" was updated by Bob', [owner, editor, reader, owner],
            exclude_user_id=editor,
        )
        await dispatcher.stop()

        assert queued is True
        channels = [channel for channel, _ in fake_redis.published]
        assert channels == [dispatcher.channel_for(owner), dispatcher.channel_for(reader)]

        payload = fake_redis.published[0][1]
        assert payload["type"] == "note_updated"
        assert payload["noteId"] == str(note_id)
        assert "Trip Plan" in payload["message"]
        assert "createdAt" in payload

    @pytest.mark.asyncio
    async def test_full_queue_drops_event(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis, notification_queue_size=1)
        await dispatcher.start()
        try:
            user = uuid.uuid4()
            # the worker cannot drain until we yield to the loop
            assert dispatcher.notify(uuid.uuid4(), "first", [user]) is True
            assert dispatcher.notify(uuid.uuid4(), "second", [user]) is False
        finally:
            await dispatcher.stop()

        assert [payload["message"] for _, payload in fake_redis.published] == ["first"]

    @pytest.mark.asyncio
    async def test_worker_survives_delivery_errors(self, make_dispatcher):
        redis_client = FakeRedis(fail_first=True)
        dispatcher = make_dispatcher(redis_client)
        user = uuid.uuid4()

        await dispatcher.start()
        dispatcher.notify(uuid.uuid4(), "lost", [user])
        await asyncio.sleep(0)
        dispatcher.notify(uuid.uuid4(), "delivered", [user])
        await dispatcher.stop()

        assert [payload["message"] for _, payload in redis_client.published] == ["delivered"]

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis)
        await dispatcher.start()
        await dispatcher.start()
        assert dispatcher.is_running

        await dispatcher.stop()
        await dispatcher.stop()
        assert not dispatcher.is_running

    @pytest.mark.asyncio
    async def test_deliver_direct(self, fake_redis, make_dispatcher):
        dispatcher = make_dispatcher(fake_redis)
        recipients = (uuid.uuid4(), uuid.uuid4())
        event = NoteNotification(
            note_id=uuid.uuid4(), message="shared", recipient_ids=recipients, kind="note_shared"
        )

        assert await dispatcher.deliver(event) == 2
        assert all(payload["type"] == "note_shared" for _, payload in fake_redis.published)

    @pytest.mark.asyncio
    async def test_deliver_counts_only_channels_with_subscribers(self, make_dispatcher):
        online, offline = uuid.uuid4(), uuid.uuid4()

        class PartialRedis(FakeRedis):
            async def publish(self, channel, payload):
                await super().publish(channel, payload)
                return 0 if channel.endswith(str(offline)) else 2

        dispatcher = make_dispatcher(PartialRedis())
        event = NoteNotification(note_id=uuid.uuid4(), message="hi", recipient_ids=(online, offline))

        assert await dispatcher.deliver(event) == 1

    @pytest.mark.asyncio
    async def test_deliver_with_redis_down_counts_nothing(self, make_dispatcher):
        # RedisClient that never connected swallows the publish and returns 0
        dispatcher = make_dispatcher(RedisClient())
        event = NoteNotification(
            note_id=uuid.uuid4(), message="hi", recipient_ids=(uuid.uuid4(), uuid.uuid4())
        )

        assert await dispatcher.deliver(event) == 0
