import pytest

from gotenberg.metrics import Metric, MetricsProvider


def test_read_value_returns_current_value():
    metric = Metric(name="queue_size", read=lambda: 1.5, description="queue")
    assert metric.read_value() == 1.5
    assert metric.description == "queue"


def test_read_value_is_live():
    state = {"count": 0}

    def read():
        return state["count"]

    metric = Metric(name="count", read=read)
    first = metric.read_value()
    state["count"] += 4
    assert metric.read_value() == first + 4


def test_description_is_optional():
    metric = Metric(name="x", read=lambda: 0)
    assert metric.description == ""


@pytest.mark.parametrize(
    "name, read",
    [("", lambda: 0.0), ("x", None)],
)
def test_invalid_metric(name, read):
    with pytest.raises(ValueError):
        Metric(name=name, read=read)


def test_provider_protocol_recognises_providers():
    metric = Metric(name="answer", read=lambda: 7.0)

    class Provider:
        def metrics(self):
            return [metric]

    provider = Provider()
    assert isinstance(provider, MetricsProvider) is True
    assert isinstance(object(), MetricsProvider) is False
    assert metric.read_value() == 7.0
    assert metric.name == "answer"


def test_provider_metrics():
    first = Metric(name="a", read=lambda: 2.0)
    second = Metric(name="b", read=lambda: 3.0)

    class Provider:
        def metrics(self):
            return [first, second]

    provider = Provider()
    assert isinstance(provider, MetricsProvider) is True
    assert first.read_value() == 2.0
    assert second.read_value() == 3.0
    assert first.name == "a"
    assert second.name == "b"