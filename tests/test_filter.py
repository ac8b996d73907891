from datetime import datetime, timedelta

import pytest
import regex

from gotenberg.filter import Filtered, filter_deadline
from gotenberg.lifecycle import DeadlineExceeded


def _past():
    return datetime.now() - timedelta(hours=1)


def _future():
    return datetime.now() + timedelta(seconds=5)


def test_deadline_exceeded_allowed():
    with pytest.raises(DeadlineExceeded):
        filter_deadline("foo", "", "foo", _past())


def test_filtered_allowed():
    with pytest.raises(Filtered, match="allowed list"):
        filter_deadline("foo", "", "bar", _future())


def test_deadline_exceeded_denied():
    with pytest.raises(DeadlineExceeded):
        filter_deadline("", "foo", "foo", _past())


def test_filtered_denied():
    with pytest.raises(Filtered, match="denied list"):
        filter_deadline("", "foo", "foo", _future())


def test_success():
    assert filter_deadline("", "", "foo", _future()) is None


def test_allowed_and_not_denied():
    assert filter_deadline("^https?://", "internal", "https://example.com", _future()) is None


def test_compiled_patterns_accepted():
    with pytest.raises(Filtered):
        filter_deadline(regex.compile("foo"), regex.compile(""), "bar", _future())


def test_empty_patterns_ignore_past_deadline():
    assert filter_deadline(None, None, "foo", _past()) is None