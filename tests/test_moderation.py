import pytest

from utils.metrics import HitCounter
from utils.moderation import clean_body


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I had something interesting for breakfast", "I had something interesting for breakfast"),
        ("This is a kerfuffle opinion I need to share with the world",
         "This is a **** opinion I need to share with the world"),
        ("I really need a Sharbert and a FORNAX", "I really need a **** and a ****"),
        ("Sharbert!", "Sharbert!"),
        ("two  spaces kept", "two  spaces kept"),
    ],
)
def test_clean_body(text, expected):
    assert clean_body(text) == expected


def test_hit_counter():
    hits = HitCounter()
    assert hits.value == 0
    assert hits.increment() == 1
    hits.increment()
    assert hits.value == 2
    hits.reset()
    assert hits.value == 0
