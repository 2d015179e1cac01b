"""
Bidding for the bottom cards.

The seat dealt the face-up card is offered the bottom cards first and the
offer moves round the table on each pass. After enough passes every hand
is revealed and the offer restarts from the original seat; if it is
refused again the landlord is assigned by force.
"""

from dataclasses import dataclass
from typing import Optional

from .models import BiddingState
from .rules import RuleConfig, default_rules

OUTCOME_LANDLORD = 'landlord'
OUTCOME_REVEALED = 'revealed'
OUTCOME_NEXT = 'next'


@dataclass
class BidOutcome:
    kind: str
    seat: int  # landlord seat, or the seat now holding the offer
    doubled: bool = False
    forced: bool = False


def start_bidding(origin_seat: int) -> BiddingState:
    return BiddingState(origin_seat=origin_seat, pick_index=origin_seat)


def next_seat(seat: int, seat_count: int = 3) -> int:
    return (seat + 1) % seat_count


def can_decide(bidding: Optional[BiddingState], seat: int) -> bool:
    """Only the seat holding the offer may act, and only until someone is landlord."""
    return bidding is not None and not bidding.resolved and bidding.pick_index == seat


def apply_decision(bidding: BiddingState, take: bool, seat_count: int = 3,
                   rules: RuleConfig = default_rules) -> BidOutcome:
    """
    Apply the current seat's take or pass decision.

    Mutates ``bidding`` in place. Callers must check :func:`can_decide` first.
    """
    seat = bidding.pick_index

    if take:
        bidding.landlord_seat = seat
        # Picking up before anyone's hand is shown doubles the wager
        return BidOutcome(OUTCOME_LANDLORD, seat, doubled=not bidding.revealed)

    bidding.attempts += 1

    if not bidding.revealed:
        if bidding.attempts >= rules.reveal_after_passes:
            bidding.revealed = True
            bidding.attempts = 0
            bidding.pick_index = bidding.origin_seat
            return BidOutcome(OUTCOME_REVEALED, bidding.pick_index)
        bidding.pick_index = next_seat(seat, seat_count)
        return BidOutcome(OUTCOME_NEXT, bidding.pick_index)

    if bidding.attempts >= rules.forced_after_passes:
        forced_seat = next_seat(seat, seat_count)
        bidding.landlord_seat = forced_seat
        bidding.pick_index = forced_seat
        bidding.forced = True
        return BidOutcome(OUTCOME_LANDLORD, forced_seat, forced=True)

    bidding.pick_index = next_seat(seat, seat_count)
    return BidOutcome(OUTCOME_NEXT, bidding.pick_index)
