from arranke_toolkit.utils.notifications import ChangeNotifier, Subscription


async def test_publish_reaches_sync_and_async_subscribers():
    notifier: ChangeNotifier[str, int] = ChangeNotifier()
    received: list[tuple[str, int]] = []

    async def on_async(value: int) -> None:
        received.append(("async", value))

    notifier.subscribe("a", lambda value: received.append(("sync", value)))
    notifier.subscribe("a", on_async)
    notifier.subscribe("b", lambda value: received.append(("other", value)))

    await notifier.publish("a", 1)

    assert received == [("sync", 1), ("async", 1)]


async def test_unsubscribe_is_idempotent():
    notifier: ChangeNotifier[str, int] = ChangeNotifier()
    received: list[int] = []
    subscription = notifier.subscribe("a", received.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    await notifier.publish("a", 1)

    assert received == []
    assert not subscription.active
    assert notifier.subscriber_count("a") == 0


async def test_failing_subscriber_does_not_block_others(log_messages):
    notifier: ChangeNotifier[str, int] = ChangeNotifier()
    received: list[int] = []

    def broken(value: int) -> None:
        raise RuntimeError("boom")

    notifier.subscribe("a", broken)
    notifier.subscribe("a", received.append)

    await notifier.publish("a", 3)

    assert received == [3]
    assert any("Change subscriber" in message for message in log_messages)


def test_subscription_release_runs_once():
    released: list[bool] = []
    subscription = Subscription(lambda: released.append(True))

    subscription.unsubscribe()
    subscription.unsubscribe()

    assert released == [True]
