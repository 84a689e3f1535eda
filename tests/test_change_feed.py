from servicedesk.services.change_feed import ChangeFeed


def test_publish_reaches_every_subscriber():
    feed = ChangeFeed()
    calls = []
    feed.subscribe(lambda: calls.append("a"))
    feed.subscribe(lambda: calls.append("b"))

    feed.publish("INSERT")

    assert sorted(calls) == ["a", "b"]


def test_close_releases_exactly_once():
    feed = ChangeFeed()
    first = feed.subscribe(lambda: None)
    feed.subscribe(lambda: None)

    first.close()
    first.close()

    assert first.closed
    assert feed.subscriber_count == 1


def test_subscription_as_context_manager():
    feed = ChangeFeed()
    calls = []

    with feed.subscribe(lambda: calls.append(1)):
        feed.publish()
    feed.publish()

    assert calls == [1]
    assert feed.subscriber_count == 0


def test_failing_subscriber_does_not_block_others():
    feed = ChangeFeed()
    calls = []

    def broken():
        raise RuntimeError("view went away")

    feed.subscribe(broken)
    feed.subscribe(lambda: calls.append("ok"))

    feed.publish()

    assert calls == ["ok"]
