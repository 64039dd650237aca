"""
Test suite for the publish/subscribe channels in channel.py.

Sections covered:
- Subscription management
- Delivery order and filtering
- Subscriber failure isolation
- Thread safety of the registry
"""
import logging
import threading

import pytest

from stately.core.channel import Channel, FilteredChannel, Subscription

# -----------------------------------------------------------------------------
# SUBSCRIPTION MANAGEMENT
# -----------------------------------------------------------------------------


def test_subscribe_returns_handle() -> None:
    channel = Channel("test")
    subscription = channel.subscribe(lambda event: None)
    assert isinstance(subscription, Subscription)
    assert not subscription.closed
    assert channel.subscriber_count == 1


def test_subscribe_rejects_non_callable() -> None:
    with pytest.raises(ValueError) as exc_info:
        Channel("test").subscribe("not callable")
    assert "callable" in str(exc_info.value)


def test_unsubscribe_stops_delivery(recorder) -> None:
    channel = Channel("test")
    subscription = channel.subscribe(recorder)
    channel.publish(1)
    subscription.unsubscribe()
    channel.publish(2)
    assert recorder.events == [1]
    assert subscription.closed
    assert channel.subscriber_count == 0


def test_unsubscribe_is_idempotent() -> None:
    channel = Channel("test")
    subscription = channel.subscribe(lambda event: None)
    subscription.unsubscribe()
    subscription.unsubscribe()
    assert channel.subscriber_count == 0


def test_same_callback_registered_twice(recorder) -> None:
    """
    Each subscribe call is its own registration; removing one leaves the other.
    """
    channel = Channel("test")
    first = channel.subscribe(recorder)
    channel.subscribe(recorder)
    channel.publish("x")
    first.unsubscribe()
    channel.publish("y")
    assert recorder.events == ["x", "x", "y"]


def test_context_manager_unsubscribes(recorder) -> None:
    channel = Channel("test")
    with channel.subscribe(recorder) as subscription:
        channel.publish(1)
    channel.publish(2)
    assert subscription.closed
    assert recorder.events == [1]


# -----------------------------------------------------------------------------
# DELIVERY
# -----------------------------------------------------------------------------


def test_delivery_in_registration_order() -> None:
    channel = Channel("test")
    calls = []
    for index in range(5):
        channel.subscribe(lambda event, index=index: calls.append(index))
    channel.publish("event")
    assert calls == [0, 1, 2, 3, 4]


def test_no_replay_for_late_subscribers(recorder) -> None:
    channel = Channel("test")
    channel.publish("early")
    channel.subscribe(recorder)
    channel.publish("late")
    assert recorder.events == ["late"]


def test_publish_without_subscribers() -> None:
    Channel("test").publish("nobody listening")


def test_subscriber_added_during_publish_sees_next_event_only(recorder) -> None:
    channel = Channel("test")

    def add_recorder(event):
        if event == 1:
            channel.subscribe(recorder)

    channel.subscribe(add_recorder)
    channel.publish(1)
    channel.publish(2)
    assert recorder.events == [2]


def test_subscriber_removed_during_publish_is_skipped(recorder) -> None:
    channel = Channel("test")
    handles = {}
    channel.subscribe(lambda event: handles["later"].unsubscribe())
    handles["later"] = channel.subscribe(recorder)
    channel.publish(1)
    assert recorder.events == []


def test_filter_view(recorder) -> None:
    channel = Channel("numbers")
    view = channel.filter(lambda n: n % 2 == 0)
    assert isinstance(view, FilteredChannel)
    view.subscribe(recorder)
    for n in range(6):
        channel.publish(n)
    assert recorder.events == [0, 2, 4]


def test_filter_composition(recorder) -> None:
    channel = Channel("numbers")
    channel.filter(lambda n: n % 2 == 0).filter(lambda n: n > 2).subscribe(recorder)
    for n in range(8):
        channel.publish(n)
    assert recorder.events == [4, 6]


def test_filtered_subscription_registered_on_base(recorder) -> None:
    """
    Filtered and unfiltered subscribers share one ordering and one registry.
    """
    channel = Channel("test")
    calls = []
    channel.subscribe(lambda event: calls.append("base-1"))
    subscription = channel.filter(lambda event: True).subscribe(lambda event: calls.append("view"))
    channel.subscribe(lambda event: calls.append("base-2"))
    assert channel.subscriber_count == 3
    channel.publish(None)
    assert calls == ["base-1", "view", "base-2"]
    subscription.unsubscribe()
    assert channel.subscriber_count == 2


def test_filter_rejects_non_callable() -> None:
    with pytest.raises(ValueError):
        Channel("test").filter(42)


# -----------------------------------------------------------------------------
# FAILURE ISOLATION
# -----------------------------------------------------------------------------


def test_failing_subscriber_is_isolated(recorder, caplog: pytest.LogCaptureFixture) -> None:
    channel = Channel("test")

    def explode(event):
        raise RuntimeError("boom")

    channel.subscribe(explode)
    channel.subscribe(recorder)

    with caplog.at_level(logging.ERROR, logger="stately.core.channel"):
        channel.publish("event")

    assert recorder.events == ["event"]
    assert any("failed" in record.getMessage() for record in caplog.records)
    assert any(record.exc_info for record in caplog.records)


# -----------------------------------------------------------------------------
# THREAD SAFETY
# -----------------------------------------------------------------------------


def test_concurrent_subscribe_and_publish() -> None:
    channel = Channel("test")
    received = []
    lock = threading.Lock()

    def record(event):
        with lock:
            received.append(event)

    def subscriber_worker():
        for _ in range(50):
            channel.subscribe(record).unsubscribe()

    def publisher_worker():
        for n in range(50):
            channel.publish(n)

    anchor = channel.subscribe(record)
    threads = [threading.Thread(target=subscriber_worker) for _ in range(4)]
    threads.append(threading.Thread(target=publisher_worker))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert channel.subscriber_count == 1
    assert not anchor.closed
    assert set(range(50)) <= set(received)
