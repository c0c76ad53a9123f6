"""Protocol constants shared by the bank, coin holders and merchants."""

# Tag identifying the issuing bank in the canonical coin string.
BANK_STR = "ELECTRONIC_PIGGYBANK"

# Marker prefixed to the owner's identity inside every identity string.
IDENT_STR = "IDENT"
IDENT_SEPARATOR = ":"

# Number of left/right identity string pairs committed in a coin.
COIN_RIS_LENGTH = 20

DEFAULT_KEY_BITS = 2048
DEFAULT_PUBLIC_EXPONENT = 65537

FIELD_SEPARATOR = "-"
HASH_SEPARATOR = ","
