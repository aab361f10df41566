"""H264 profile-level-id handling for SDP offer/answer negotiation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Mapping, Optional

from .errors import NegotiationError

PROFILE_LEVEL_ID_KEY = "profile-level-id"
LEVEL_ASYMMETRY_ALLOWED_KEY = "level-asymmetry-allowed"
_DEFAULT_PROFILE_LEVEL_ID = "42e01f"
_CONSTRAINT_SET3_FLAG = 0x10
_HEX6_RE = re.compile(r"[0-9a-fA-F]{6}")


class Profile(Enum):
    CONSTRAINED_BASELINE = "constrained-baseline"
    BASELINE = "baseline"
    MAIN = "main"
    CONSTRAINED_HIGH = "constrained-high"
    HIGH = "high"
    PREDICTIVE_HIGH_444 = "predictive-high-444"


class Level(IntEnum):
    LEVEL_1_B = 0
    LEVEL_1 = 10
    LEVEL_1_1 = 11
    LEVEL_1_2 = 12
    LEVEL_1_3 = 13
    LEVEL_2 = 20
    LEVEL_2_1 = 21
    LEVEL_2_2 = 22
    LEVEL_3 = 30
    LEVEL_3_1 = 31
    LEVEL_3_2 = 32
    LEVEL_4 = 40
    LEVEL_4_1 = 41
    LEVEL_4_2 = 42
    LEVEL_5 = 50
    LEVEL_5_1 = 51
    LEVEL_5_2 = 52


@dataclass(frozen=True)
class ProfileLevelId:
    """A decoded H264 profile and level."""

    profile: Profile
    level: Level


@dataclass(frozen=True)
class _BitPattern:
    mask: int
    value: int

    @classmethod
    def from_string(cls, pattern: str) -> "_BitPattern":
        mask = int("".join("0" if c == "x" else "1" for c in pattern), 2)
        value = int(pattern.replace("x", "0"), 2)
        return cls(mask, value)

    def matches(self, byte: int) -> bool:
        return byte & self.mask == self.value


_PROFILE_PATTERNS = [
    (0x42, _BitPattern.from_string("x1xx0000"), Profile.CONSTRAINED_BASELINE),
    (0x4D, _BitPattern.from_string("1xxx0000"), Profile.CONSTRAINED_BASELINE),
    (0x58, _BitPattern.from_string("11xx0000"), Profile.CONSTRAINED_BASELINE),
    (0x42, _BitPattern.from_string("x0xx0000"), Profile.BASELINE),
    (0x58, _BitPattern.from_string("10xx0000"), Profile.BASELINE),
    (0x4D, _BitPattern.from_string("0x0x0000"), Profile.MAIN),
    (0x64, _BitPattern.from_string("00000000"), Profile.HIGH),
    (0x64, _BitPattern.from_string("00001100"), Profile.CONSTRAINED_HIGH),
    (0xF4, _BitPattern.from_string("00000000"), Profile.PREDICTIVE_HIGH_444),
]

_PROFILE_PREFIXES = {
    Profile.CONSTRAINED_BASELINE: "42e0",
    Profile.BASELINE: "4200",
    Profile.MAIN: "4d00",
    Profile.CONSTRAINED_HIGH: "640c",
    Profile.HIGH: "6400",
    Profile.PREDICTIVE_HIGH_444: "f400",
}

_LEVEL_1_B_STRINGS = {
    Profile.CONSTRAINED_BASELINE: "42f00b",
    Profile.BASELINE: "42100b",
    Profile.MAIN: "4d100b",
}


def parse_profile_level_id(text: str) -> Optional[ProfileLevelId]:
    """Decode a six-digit hex profile-level-id; return None if it is invalid."""
    if not isinstance(text, str) or _HEX6_RE.fullmatch(text) is None:
        return None
    numeric = int(text, 16)
    if numeric == 0:
        return None

    level_idc = numeric & 0xFF
    profile_iop = (numeric >> 8) & 0xFF
    profile_idc = (numeric >> 16) & 0xFF

    if level_idc == Level.LEVEL_1_1:
        level = Level.LEVEL_1_B if profile_iop & _CONSTRAINT_SET3_FLAG else Level.LEVEL_1_1
    elif level_idc != Level.LEVEL_1_B and level_idc in Level._value2member_map_:
        level = Level(level_idc)
    else:
        return None

    for idc, pattern, profile in _PROFILE_PATTERNS:
        if idc == profile_idc and pattern.matches(profile_iop):
            return ProfileLevelId(profile, level)
    return None


def profile_level_id_to_string(profile_level_id: ProfileLevelId) -> Optional[str]:
    """Encode a profile and level; None where level 1b has no encoding."""
    if profile_level_id.level is Level.LEVEL_1_B:
        return _LEVEL_1_B_STRINGS.get(profile_level_id.profile)
    prefix = _PROFILE_PREFIXES[profile_level_id.profile]
    return f"{prefix}{int(profile_level_id.level):02x}"


def parse_sdp_profile_level_id(params: Mapping[str, object]) -> Optional[ProfileLevelId]:
    """Read the profile-level-id of SDP format parameters, with the SDP default."""
    value = params.get(PROFILE_LEVEL_ID_KEY)
    if value is None:
        return parse_profile_level_id(_DEFAULT_PROFILE_LEVEL_ID)
    return parse_profile_level_id(str(value))


def is_same_profile(params1: Mapping[str, object], params2: Mapping[str, object]) -> bool:
    """Whether both parameter sets carry a valid and identical H264 profile."""
    first = parse_sdp_profile_level_id(params1)
    second = parse_sdp_profile_level_id(params2)
    return first is not None and second is not None and first.profile == second.profile


def _is_level_asymmetry_allowed(params: Mapping[str, object]) -> bool:
    return str(params.get(LEVEL_ASYMMETRY_ALLOWED_KEY)) == "1"


def _is_less_level(a: Level, b: Level) -> bool:
    if a is Level.LEVEL_1_B:
        return b not in (Level.LEVEL_1, Level.LEVEL_1_B)
    if b is Level.LEVEL_1_B:
        return a is Level.LEVEL_1
    return a < b


def _min_level(a: Level, b: Level) -> Level:
    return a if _is_less_level(a, b) else b


def generate_profile_level_id_for_answer(
    local_params: Mapping[str, object], remote_params: Mapping[str, object]
) -> dict:
    """Return the answer's format parameters holding the negotiated profile-level-id.

    The result is empty when neither side states a profile-level-id. Raises
    :class:`NegotiationError` when a profile-level-id is invalid or the
    profiles differ.
    """
    if PROFILE_LEVEL_ID_KEY not in local_params and PROFILE_LEVEL_ID_KEY not in remote_params:
        return {}

    local = parse_sdp_profile_level_id(local_params)
    remote = parse_sdp_profile_level_id(remote_params)
    if local is None or remote is None:
        raise NegotiationError("invalid H264 profile-level-id")
    if local.profile != remote.profile:
        raise NegotiationError("H264 profiles do not match")

    asymmetry_allowed = _is_level_asymmetry_allowed(
        local_params
    ) and _is_level_asymmetry_allowed(remote_params)
    answer_level = local.level if asymmetry_allowed else _min_level(local.level, remote.level)

    encoded = profile_level_id_to_string(ProfileLevelId(local.profile, answer_level))
    if encoded is None:
        raise NegotiationError("cannot encode H264 profile-level-id")
    return {PROFILE_LEVEL_ID_KEY: encoded}