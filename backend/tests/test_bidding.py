import pytest

from liarsdice.models import Bid
from liarsdice.services.games.bidding import is_legal


def test_any_valid_opening_bid_is_legal():
    assert is_legal(Bid(1, 2), None, 12)
    assert is_legal(Bid(12, 6), None, 12)


@pytest.mark.parametrize('bid', [Bid(1, 1), Bid(1, 7), Bid(0, 3), Bid(13, 3)])
def test_out_of_range_bids_are_illegal(bid):
    assert not is_legal(bid, None, 12)


def test_higher_quantity_beats_any_face():
    assert is_legal(Bid(3, 2), Bid(2, 6), 12)


def test_same_quantity_needs_higher_face():
    current = Bid(2, 4)
    assert is_legal(Bid(2, 5), current, 12)
    assert not is_legal(Bid(2, 4), current, 12)
    assert not is_legal(Bid(2, 3), current, 12)


def test_lower_quantity_never_legal():
    assert not is_legal(Bid(1, 6), Bid(2, 2), 12)


def test_dice_in_play_caps_quantity():
    assert is_legal(Bid(5, 2), Bid(4, 6), 5)
    assert not is_legal(Bid(6, 2), Bid(4, 6), 5)
    # Top of the order: nothing beats the maximal bid
    assert not any(is_legal(Bid(q, f), Bid(5, 6), 5) for q in range(1, 7) for f in range(2, 7))
