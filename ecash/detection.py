"""
Double-spending detection.

Two merchants that accepted the same coin each hold one half of every
identity string pair. Wherever they picked different halves, xoring the two
gives back `IDENT:<owner>`. If they picked the same half everywhere, one of
them replayed the other's data instead of challenging the owner.

Example:
    >>> ris = ["00ff"]
    >>> outcome = detect("guid", ris, [Side.LEFT], ris, [Side.LEFT])
    >>> isinstance(outcome, MerchantCheated)
    True
"""

from __future__ import annotations

import binascii
import logging
from typing import (
    Optional,
    Sequence,
    Union,
)

import attr

from . import config
from .identity import Side, xor_bytes
from .merchant import RevealedIdentity


logger = logging.getLogger(__name__)

_MARKER = f"{config.IDENT_STR}{config.IDENT_SEPARATOR}".encode('utf8')


class MalformedRis(ValueError):
    """Revealed identity strings can not be compared."""


@attr.s(slots=True, frozen=True)
class DoubleSpent:
    """The coin was spent twice by 'identity'."""
    guid = attr.ib()     # type: str
    identity = attr.ib() # type: str


@attr.s(slots=True, frozen=True)
class MerchantCheated:
    """A merchant deposited another merchant's identity strings."""
    guid = attr.ib() # type: str


Outcome = Union[DoubleSpent, MerchantCheated]


def _decode(ris: str, index: int) -> bytes:
    try:
        return bytes.fromhex(ris)
    except (TypeError, ValueError, binascii.Error) as ex:
        raise MalformedRis(f"Identity string at index {index} is not hex") from ex


def _sides(sides: Sequence[Union[Side, bool, int]]) -> Sequence[Side]:
    try:
        return [Side.coerce(side) for side in sides]
    except ValueError as ex:
        raise MalformedRis("Invalid side marker") from ex


def _reveal(xored: bytes) -> Optional[str]:
    if not xored.startswith(_MARKER):
        return None
    try:
        return xored[len(_MARKER):].decode('utf8')
    except UnicodeDecodeError:
        return None


def detect(
        guid: str,
        ris1: Sequence[str],
        sides1: Sequence[Union[Side, bool, int]],
        ris2: Sequence[str],
        sides2: Sequence[Union[Side, bool, int]]
    ) -> Outcome:
    """Determine who cheated on a coin deposited twice.

    :param guid: coin identifier
    :param ris1: hex identity strings reported by the first merchant
    :param sides1: halves revealed to the first merchant
    :param ris2: hex identity strings reported by the second merchant
    :param sides2: halves revealed to the second merchant
    :raises MalformedRis: the sequences or the strings differ in length, or
        are not hex
    :return: DoubleSpent with the owner's identity, or MerchantCheated
    """
    if not (len(ris1) == len(sides1) == len(ris2) == len(sides2)):
        raise MalformedRis("Identity string sequences differ in length")
    if not ris1:
        raise MalformedRis("Identity string sequences are empty")

    sides1 = _sides(sides1)
    sides2 = _sides(sides2)
    bufs1 = [_decode(a, i) for i, a in enumerate(ris1)]
    bufs2 = [_decode(b, i) for i, b in enumerate(ris2)]
    for i, (buf1, buf2) in enumerate(zip(bufs1, bufs2)):
        if len(buf1) != len(buf2):
            raise MalformedRis(f"Identity strings at index {i} differ in length")

    for i, (buf1, buf2) in enumerate(zip(bufs1, bufs2)):
        if sides1[i] == sides2[i]:
            continue

        identity = _reveal(xor_bytes(buf1, buf2))
        if identity is not None:
            logger.warning("Coin %s was double-spent by %s", guid, identity)
            return DoubleSpent(guid, identity)

    logger.warning("Merchant cheated for coin %s", guid)
    return MerchantCheated(guid)


def determine_cheater(first: RevealedIdentity, second: RevealedIdentity) -> Outcome:
    """Run detect on two deposits of the same coin."""
    if first.guid != second.guid:
        raise MalformedRis(f"Deposits belong to different coins: {first.guid}, {second.guid}")
    return detect(first.guid, first.ris, first.sides, second.ris, second.sides)
