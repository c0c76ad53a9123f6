""" Adds serialization support.

This module adds 'to_bytes' and 'from_bytes' to the e-cash data classes.
Furthermore, 'packb' and 'unpackb' enable serialization of e-cash and petlib
classes with msgpack protocol, e.g. for a merchant sending its deposit to the
bank.

    >>> from ecash.merchant import RevealedIdentity
    >>> revealed = RevealedIdentity("guid", ["00ff"], [Side.LEFT])
    >>> unpackb(packb(revealed)) == revealed
    True
"""

import attr
import msgpack
import petlib.pack


from . import blind_signature, coin, detection, merchant
from .identity import Side

COUNTER_BASE = 40
_pack_reg = dict()


def packb(obj):
    """packs a serializable object with msgpack"""
    return msgpack.packb(obj, default=_default, use_bin_type=True)


def unpackb(data):
    """unpacks a serialized object with msgpack"""
    return msgpack.unpackb(data, ext_hook=petlib.pack.ext_hook, raw=False)


def _default(obj):
    """Pack registered classes with their own packer, anything else with petlib's."""
    if type(obj) in _pack_reg:
        num, enc = _pack_reg[type(obj)]
        return msgpack.ExtType(num, enc(obj))
    return petlib.pack.default(obj)


def _fields(cls):
    return [a.name for a in attr.fields(cls)]


def add_msgpack_support_slots(cls, ext, add_cls_methods=True):
    """Adds serialization support,

    Enables packing and unpacking with msgpack with 'pack.packb' and
    'pack.unpackb' methods. Objects are rebuilt through the class constructor,
    so attrs converters restore tuples and enums.

    If add_cls_methods then enables equality, reading and writing for the class.
    Specifically, adds methods:
        bytes   <- obj.to_bytes()
        obj     <- cls.from_bytes(bytes)
        boolean <- obj1 == obj2

    Args:
        cls: attrs class
        ext: an unique code for the msgpack's Ext hook
    """
    keys = _fields(cls)

    def enc(obj):
        return packb({key: getattr(obj, key) for key in keys})

    def dec(data):
        return cls(**unpackb(data))

    def eq(a, b):
        if type(a) != type(b):
            return NotImplemented
        return all(getattr(a, key) == getattr(b, key) for key in keys)

    if add_cls_methods:
        if cls.__eq__ is object.__eq__:
            cls.__eq__ = eq
        cls.to_bytes = enc
        cls.from_bytes = staticmethod(dec)

    _pack_reg[cls] = (ext, enc)
    petlib.pack.register_coders(cls, ext, enc, dec)


def register_all_classes():
    # RSA keys
    add_msgpack_support_slots(blind_signature.RsaPublicKey, COUNTER_BASE+1)
    add_msgpack_support_slots(blind_signature.RsaPrivateKey, COUNTER_BASE+2)

    # Coins and deposits
    add_msgpack_support_slots(coin.ParsedCoin, COUNTER_BASE+3)
    add_msgpack_support_slots(merchant.RevealedIdentity, COUNTER_BASE+4)

    # Detection results
    add_msgpack_support_slots(detection.DoubleSpent, COUNTER_BASE+5)
    add_msgpack_support_slots(detection.MerchantCheated, COUNTER_BASE+6)

register_all_classes()


def main():
    import doctest
    doctest.testmod(verbose=True)

if __name__ == '__main__':
    main()
