"""Steam id codec.

logs.tf is queried with steamID64 values while its log documents key players
by steamID3, so every id that enters the system goes through `SteamID`, which
only ever holds a validated packed value.

Bit layout of a steamID64:

    bits  0-31  account id
    bits 32-51  instance (1 for individual users)
    bits 52-55  account type
    bits 56-63  universe
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum

ACCOUNT_ID_MASK = 0xFFFF_FFFF
INSTANCE_OFFSET_BITS = 32
INSTANCE_MASK = 0xFFFFF
ACCOUNT_TYPE_OFFSET_BITS = 52
ACCOUNT_TYPE_MASK = 0xF
UNIVERSE_OFFSET_BITS = 56
UNIVERSE_MASK = 0xFF

INDIVIDUAL_INSTANCE = 1
MAX_ID64 = 2**64 - 1

_ID64_PATTERN = re.compile(r"^[0-9]+$")
_ID3_PATTERN = re.compile(r"^\[(?P<type>[A-Za-z]):(?P<low>[0-9]+):(?P<upper>[0-9]+)\]$")
_ID1_PATTERN = re.compile(r"^STEAM_(?P<universe>[0-9]+):(?P<low>[0-9]+):(?P<upper>[0-9]+)$")


class MalformedSteamIdError(ValueError):
    """Raised when a value or text does not describe a valid individual steam id."""


class Universe(IntEnum):
    UNSPECIFIED = 0
    PUBLIC = 1
    BETA = 2
    INTERNAL = 3
    DEV = 4
    RC = 5


class AccountType(IntEnum):
    INVALID = 0
    INDIVIDUAL = 1
    MULTISEAT = 2
    GAME_SERVER = 3
    ANON_GAME_SERVER = 4
    PENDING = 5
    CONTENT_SERVER = 6
    CLAN = 7
    CHAT = 8
    # 9 (P2P super seeder) is not supported.
    ANON_USER = 10

    def to_char(self) -> str:
        return _ACCOUNT_TYPE_TO_CHAR[self]

    @classmethod
    def from_char(cls, value: str) -> AccountType:
        try:
            return _CHAR_TO_ACCOUNT_TYPE[value]
        except KeyError as exc:
            raise MalformedSteamIdError(f"Unknown account type character {value!r}") from exc


_ACCOUNT_TYPE_TO_CHAR: dict[AccountType, str] = {
    AccountType.INVALID: "I",
    AccountType.INDIVIDUAL: "U",
    AccountType.MULTISEAT: "M",
    AccountType.GAME_SERVER: "G",
    AccountType.ANON_GAME_SERVER: "A",
    AccountType.PENDING: "P",
    AccountType.CONTENT_SERVER: "C",
    AccountType.CLAN: "g",
    AccountType.CHAT: "c",
    AccountType.ANON_USER: "a",
}

_CHAR_TO_ACCOUNT_TYPE: dict[str, AccountType] = {
    char: account_type for account_type, char in _ACCOUNT_TYPE_TO_CHAR.items()
}
_CHAR_TO_ACCOUNT_TYPE["T"] = AccountType.CHAT
_CHAR_TO_ACCOUNT_TYPE["L"] = AccountType.CHAT

_UNIVERSE_VALUES = frozenset(universe.value for universe in Universe)
_ACCOUNT_TYPE_VALUES = frozenset(account_type.value for account_type in AccountType)


def _universe_bits(id64: int) -> int:
    return (id64 >> UNIVERSE_OFFSET_BITS) & UNIVERSE_MASK


def _account_type_bits(id64: int) -> int:
    return (id64 >> ACCOUNT_TYPE_OFFSET_BITS) & ACCOUNT_TYPE_MASK


def _instance_bits(id64: int) -> int:
    return (id64 >> INSTANCE_OFFSET_BITS) & INSTANCE_MASK


def _account_id_from_halves(low: str, upper: str, text: str) -> int:
    lowest_bit = int(low)
    if lowest_bit > 1:
        raise MalformedSteamIdError(f"Lowest account id bit must be 0 or 1 in {text!r}")

    upper_bits = int(upper)
    if upper_bits > ACCOUNT_ID_MASK >> 1:
        raise MalformedSteamIdError(f"Account id does not fit 32 bits in {text!r}")

    return (upper_bits << 1) | lowest_bit


@dataclass(frozen=True, order=True)
class SteamID:
    """Validated steamID64 of an individual account."""

    id64: int

    def __post_init__(self) -> None:
        id64 = self.id64
        if isinstance(id64, bool) or not isinstance(id64, int):
            raise MalformedSteamIdError(f"Steam id must be an integer, got {id64!r}")
        if id64 < 0 or id64 > MAX_ID64:
            raise MalformedSteamIdError(f"Steam id {id64} is not a 64-bit unsigned value")
        if _universe_bits(id64) not in _UNIVERSE_VALUES:
            raise MalformedSteamIdError(f"Steam id {id64} has unknown universe {_universe_bits(id64)}")
        if _account_type_bits(id64) not in _ACCOUNT_TYPE_VALUES:
            raise MalformedSteamIdError(
                f"Steam id {id64} has unknown account type {_account_type_bits(id64)}"
            )
        if _instance_bits(id64) != INDIVIDUAL_INSTANCE:
            raise MalformedSteamIdError(
                f"Steam id {id64} has instance {_instance_bits(id64)}, expected {INDIVIDUAL_INSTANCE}"
            )

    @classmethod
    def from_id64(cls, id64: int) -> SteamID:
        """Decode a raw steamID64, validating universe, account type and instance."""
        return cls(id64)

    @classmethod
    def from_parts(cls, universe: Universe, account_type: AccountType, account_id: int) -> SteamID:
        """Pack the parts into a steam id. The instance is always the individual user one."""
        if account_id < 0 or account_id > ACCOUNT_ID_MASK:
            raise MalformedSteamIdError(f"Account id {account_id} does not fit 32 bits")

        id64 = account_id
        id64 |= INDIVIDUAL_INSTANCE << INSTANCE_OFFSET_BITS
        id64 |= int(account_type) << ACCOUNT_TYPE_OFFSET_BITS
        id64 |= int(universe) << UNIVERSE_OFFSET_BITS
        return cls(id64)

    @classmethod
    def parse(cls, text: str) -> SteamID:
        """Parse a steamID64, steamID3 (`[U:1:123]`) or legacy (`STEAM_1:1:123`) string."""
        value = text.strip()

        if _ID64_PATTERN.match(value):
            return cls.from_id64(int(value))

        match = _ID3_PATTERN.match(value)
        if match is not None:
            account_type = AccountType.from_char(match["type"])
            account_id = _account_id_from_halves(match["low"], match["upper"], text)
            return cls.from_parts(Universe.PUBLIC, account_type, account_id)

        match = _ID1_PATTERN.match(value)
        if match is not None:
            universe_value = int(match["universe"])
            if universe_value not in _UNIVERSE_VALUES:
                raise MalformedSteamIdError(f"Unknown universe {universe_value} in {text!r}")
            account_id = _account_id_from_halves(match["low"], match["upper"], text)
            return cls.from_parts(Universe(universe_value), AccountType.INDIVIDUAL, account_id)

        raise MalformedSteamIdError(f"Unrecognised steam id format: {text!r}")

    @property
    def universe(self) -> Universe:
        return Universe(_universe_bits(self.id64))

    @property
    def account_type(self) -> AccountType:
        return AccountType(_account_type_bits(self.id64))

    @property
    def instance(self) -> int:
        return _instance_bits(self.id64)

    @property
    def account_id(self) -> int:
        return self.id64 & ACCOUNT_ID_MASK

    def to_id64_string(self) -> str:
        return str(self.id64)

    def to_id3_string(self) -> str:
        account_id = self.account_id
        return f"[{self.account_type.to_char()}:{account_id & 1}:{account_id >> 1}]"

    def to_id1_string(self) -> str:
        account_id = self.account_id
        return f"STEAM_{int(self.universe)}:{account_id & 1}:{account_id >> 1}"

    def __str__(self) -> str:
        return self.to_id64_string()


__all__ = [
    "AccountType",
    "MalformedSteamIdError",
    "SteamID",
    "Universe",
]
