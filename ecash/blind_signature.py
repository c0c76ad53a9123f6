"""
Chaum's RSA blind signature

Ref: Chaum, D. Blind Signatures for Untraceable Payments. Advances in
Cryptology, 1983.

A user 'RsaUser' blinds a message with a random factor r, the signer
'RsaSigner' signs the blinded value without learning the message, and the
user removes r to obtain a plain RSA signature over the SHA-256 digest of the
message.

Example:
    >>> priv, pk = generate_new_key_pair(bits=1024)
    >>> signer = RsaSigner(priv)
    >>> user = RsaUser(pk)
    >>> message = "Hello world"
    >>> blinded, factor = user.blind(message)
    >>> blind_sig = signer.sign(blinded)
    >>> sig = user.unblind(blind_sig, factor)
    >>> pk.verify_signature(sig, message)
    True
"""

from __future__ import annotations

import logging
from hashlib import sha256
from math import gcd
from typing import (
    Tuple,
    Union,
)

import attr
from petlib.bn import Bn

from . import config


logger = logging.getLogger(__name__)

Message = Union[bytes, str]


class RsaKeyInvalid(Exception):
    """The RSA key is invalid."""


def _as_bytes(message: Message) -> bytes:
    if isinstance(message, str):
        message = message.encode('utf8')
    if not isinstance(message, bytes):
        raise ValueError("Invalid message, 'message' is not bytes")
    return message


def _as_bn(value: Union[Bn, int, str]) -> Bn:
    if isinstance(value, Bn):
        return value
    if isinstance(value, int):
        return Bn.from_decimal(str(value))
    return Bn.from_decimal(value)


def message_digest(message: Message, n: Bn) -> Bn:
    """Map a message to the integer that is actually signed."""
    h: bytes = sha256(_as_bytes(message)).digest()
    return Bn.from_binary(h) % n


@attr.s(slots=True)
class RsaPublicKey:
    n = attr.ib() # type: Bn
    e = attr.ib() # type: Bn

    @classmethod
    def from_strings(cls, n: str, e: str) -> RsaPublicKey:
        """Rebuild a public key from its decimal string encoding."""
        if not all(isinstance(v, str) and v.isdigit() for v in (n, e)):
            raise RsaKeyInvalid("Key parameters must be decimal strings")
        return cls(Bn.from_decimal(n), Bn.from_decimal(e))


    @property
    def n_str(self) -> str:
        return self.n.repr()


    @property
    def e_str(self) -> str:
        return self.e.repr()


    def verify_signature(self, signature: Bn, message: Message) -> bool:
        """Verify an unblinded signature.

        :param signature: the unblinded signature
        :param message: the signed message
        :return: True if the signature is valid, False otherwise
        """
        return verify(signature, message, self.n, self.e)


@attr.s(slots=True)
class RsaPrivateKey:
    n = attr.ib() # type: Bn
    e = attr.ib() # type: Bn
    d = attr.ib() # type: Bn

    def public_key(self) -> RsaPublicKey:
        """Create a public key corresponding to this private key."""
        return RsaPublicKey(self.n, self.e)


def generate_new_key_pair(
        bits: int = config.DEFAULT_KEY_BITS,
        e: int = config.DEFAULT_PUBLIC_EXPONENT
    ) -> Tuple[RsaPrivateKey, RsaPublicKey]:
    """Generate a new RSA key pair.

    :param bits: size of the modulus
    :param e: public exponent
    :return: a tuple containing a private key and its corresponding public key
    """
    if bits < 512:
        raise ValueError("RSA modulus must have at least 512 bits")

    e_bn: Bn = Bn(e)
    while True:
        p: Bn = Bn.get_prime(bits // 2, safe=0)
        q: Bn = Bn.get_prime(bits - bits // 2, safe=0)
        if p == q:
            continue
        phi: Bn = (p - 1) * (q - 1)
        if gcd(e, phi.int()) != 1:
            continue
        n: Bn = p * q
        d: Bn = e_bn.mod_inverse(phi)
        break

    logger.debug("Generated a %d bit RSA key pair", n.num_bits())
    private = RsaPrivateKey(n, e_bn, d)
    return private, private.public_key()


def blind(message: Message, n: Union[Bn, int, str], e: Union[Bn, int, str]) -> Tuple[Bn, Bn]:
    """Blind a message for the owner of the public key (n, e).

    :return: a tuple containing the blinded message and the blinding factor
    """
    n = _as_bn(n)
    e = _as_bn(e)

    while True:
        r: Bn = n.random()
        if r > 1 and gcd(r.int(), n.int()) == 1:
            break

    blinded: Bn = message_digest(message, n).mod_mul(r.mod_pow(e, n), n)
    return blinded, r


def sign(blinded: Bn, key: RsaPrivateKey) -> Bn:
    """Sign a blinded message. The signer learns nothing about the message."""
    if not (0 <= blinded < key.n):
        raise ValueError("Blinded message is out of range")
    return blinded.mod_pow(key.d, key.n)


def unblind(factor: Bn, signature: Bn, n: Union[Bn, int, str]) -> Bn:
    """Remove the blinding factor from a blind signature."""
    n = _as_bn(n)
    return signature.mod_mul(factor.mod_inverse(n), n)


def verify(
        signature: Bn,
        message: Message,
        n: Union[Bn, int, str],
        e: Union[Bn, int, str]
    ) -> bool:
    """Verify an unblinded signature over message against (n, e)."""
    n = _as_bn(n)
    e = _as_bn(e)
    if not isinstance(signature, Bn) or not (0 < signature < n):
        return False
    return signature.mod_pow(e, n) == message_digest(message, n)


class RsaSigner:
    """Signer for Chaum's blind signature scheme.

    :param private: signer's private key
    """

    __slots__ = ("private",)

    def __init__(self, private: RsaPrivateKey) -> None:
        self.private: RsaPrivateKey = private


    def sign(self, blinded: Bn) -> Bn:
        return sign(blinded, self.private)


class RsaUser:
    """User for Chaum's blind signature scheme.

    :param public: signer's public key
    """

    __slots__ = ("public",)

    def __init__(self, public: RsaPublicKey) -> None:
        self.public: RsaPublicKey = public


    def blind(self, message: Message) -> Tuple[Bn, Bn]:
        return blind(message, self.public.n, self.public.e)


    def unblind(self, signature: Bn, factor: Bn) -> Bn:
        return unblind(factor, signature, self.public.n)


def main():
    import doctest
    doctest.testmod(verbose=True)


if __name__ == "__main__":
    main()
