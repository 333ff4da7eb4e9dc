"""
Powder units: packets, cups and what they cost.

A packet holds ``CUPS_PER_PACKET`` cups. Stock balances are kept in
cup-equivalents and turned back into packets + cups for display.
"""
from typing import Tuple

from kavabar.core.config import settings

CUPS_PER_PACKET = 8
PACKET_COST = settings.packet_cost
CUP_COST = PACKET_COST / CUPS_PER_PACKET


def to_cups(packets: float, cups: float) -> float:
    return packets * CUPS_PER_PACKET + cups


def to_packets_and_cups(total_cups: float) -> Tuple[int, float]:
    """
    Split a cup-equivalent total into (packets, cups) with truncating division.

    Both parts carry the sign of the total, so a deficit of 10 cups is
    (-1, -2) and ``to_cups(*to_packets_and_cups(t)) == t`` for any ``t``.
    """
    sign = -1 if total_cups < 0 else 1
    magnitude = abs(total_cups)
    packets = int(magnitude // CUPS_PER_PACKET)
    cups = magnitude - packets * CUPS_PER_PACKET
    if sign < 0:
        # no -0 cups on an exact packet deficit
        return -packets, (-cups if cups else cups)
    return packets, cups


def powder_cost(packets: float, cups: float) -> float:
    return packets * PACKET_COST + cups * CUP_COST
