import pytest

from core.errors import LoadError, SaveError, reduce_error


@pytest.mark.parametrize("error, expected", [
    ({"body": [{"message": "A"}, {"message": "B"}]}, "A, B"),
    ({"body": {"message": "Row locked"}}, "Row locked"),
    ({"message": "Network down"}, "Network down"),
    ({"body": {"status": 500}, "message": "Server error"}, "Server error"),
    ({}, "Unknown error"),
    (None, "Unknown error"),
    ({"body": []}, "Unknown error"),
    ({"body": [{"message": "A"}, {"code": 1}, {"message": "B"}]}, "A, B"),
    ({"body": [{"code": 1}]}, "Unknown error"),
    ({"body": {"message": ""}}, "Unknown error"),
    ("just a string", "Unknown error"),
])
def test_reduce_error_shapes(error, expected):
    assert reduce_error(error) == expected


def test_reduce_error_on_table_errors():
    assert reduce_error(SaveError(body=[{"message": "A"}, {"message": "B"}])) == "A, B"
    assert reduce_error(LoadError(body={"message": "Timed out"})) == "Timed out"
    assert reduce_error(LoadError("Connection refused")) == "Connection refused"
    assert reduce_error(SaveError()) == "Unknown error"


def test_reduce_error_on_plain_exceptions():
    assert reduce_error(RuntimeError("boom")) == "boom"
    assert reduce_error(RuntimeError()) == "Unknown error"


def test_reduce_error_never_raises():
    class Hostile:
        @property
        def body(self):
            raise KeyError("body")

    assert reduce_error(Hostile()) == "Unknown error"
