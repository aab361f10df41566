"""Codec and header extension matching used during capability negotiation."""

from __future__ import annotations

import copy
import re
from typing import Any, Optional

from .errors import InvalidParameterError, NegotiationError
from .h264 import (
    LEVEL_ASYMMETRY_ALLOWED_KEY,
    PROFILE_LEVEL_ID_KEY,
    generate_profile_level_id_for_answer,
    is_same_profile,
)

_RTX_MIME_TYPE_RE = re.compile(r"(audio|video)/rtx", re.IGNORECASE)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parameters(codec: dict) -> dict:
    parameters = codec.get("parameters")
    return parameters if isinstance(parameters, dict) else {}


def _int_parameter(codec: dict, key: str) -> int:
    value = _parameters(codec).get(key)
    return value if _is_int(value) else 0


def _string_parameter(codec: dict, key: str, default: str) -> str:
    parameters = _parameters(codec)
    if key not in parameters:
        return default
    value = parameters[key]
    if _is_number(value):
        return str(int(value))
    if isinstance(value, str):
        return value
    return ""


def is_rtx_codec(codec: dict) -> bool:
    """Whether the codec is an audio or video RTX codec."""
    mime_type = codec.get("mimeType")
    return isinstance(mime_type, str) and _RTX_MIME_TYPE_RE.fullmatch(mime_type) is not None


def _match_h264(a_codec: dict, b_codec: dict, modify: bool) -> bool:
    a_mode = _int_parameter(a_codec, "packetization-mode")
    b_mode = _int_parameter(b_codec, "packetization-mode")
    if a_mode != b_mode:
        return False

    a_params = {
        LEVEL_ASYMMETRY_ALLOWED_KEY: str(_int_parameter(a_codec, LEVEL_ASYMMETRY_ALLOWED_KEY)),
        "packetization-mode": str(a_mode),
        PROFILE_LEVEL_ID_KEY: _string_parameter(a_codec, PROFILE_LEVEL_ID_KEY, ""),
    }
    b_params = {
        LEVEL_ASYMMETRY_ALLOWED_KEY: str(_int_parameter(b_codec, LEVEL_ASYMMETRY_ALLOWED_KEY)),
        "packetization-mode": str(b_mode),
        PROFILE_LEVEL_ID_KEY: _string_parameter(b_codec, PROFILE_LEVEL_ID_KEY, ""),
    }

    if not is_same_profile(a_params, b_params):
        return False

    try:
        answer = generate_profile_level_id_for_answer(a_params, b_params)
    except NegotiationError:
        return False

    if modify:
        profile_level_id = answer.get(PROFILE_LEVEL_ID_KEY)
        for codec in (a_codec, b_codec):
            parameters = codec.setdefault("parameters", {})
            if profile_level_id is not None:
                parameters[PROFILE_LEVEL_ID_KEY] = profile_level_id
            else:
                parameters.pop(PROFILE_LEVEL_ID_KEY, None)
    return True


def match_codecs(a_codec: dict, b_codec: dict, strict: bool = False, modify: bool = False) -> bool:
    """Whether two codecs are compatible.

    In strict mode H264 and VP9 format parameters are compared too; with
    ``modify`` the negotiated H264 profile-level-id is written to both codecs.
    """
    a_mime_type = str(a_codec.get("mimeType", "")).lower()
    b_mime_type = str(b_codec.get("mimeType", "")).lower()

    if a_mime_type != b_mime_type:
        return False
    if a_codec.get("clockRate") != b_codec.get("clockRate"):
        return False
    if ("channels" in a_codec) != ("channels" in b_codec):
        return False
    if "channels" in a_codec and a_codec["channels"] != b_codec["channels"]:
        return False

    if a_mime_type == "video/h264":
        if strict and not _match_h264(a_codec, b_codec, modify):
            return False
    elif a_mime_type == "video/vp9":
        if strict and _string_parameter(a_codec, "profile-id", "0") != _string_parameter(
            b_codec, "profile-id", "0"
        ):
            return False

    return True


def match_header_extensions(a_ext: dict, b_ext: dict) -> bool:
    """Whether two header extensions share kind and URI."""
    return a_ext.get("kind") == b_ext.get("kind") and a_ext.get("uri") == b_ext.get("uri")


def reduce_rtcp_feedback(codec_a: dict, codec_b: dict) -> list:
    """RTCP feedback entries of ``codec_a`` that ``codec_b`` also supports."""
    reduced = []
    feedback_b = codec_b.get("rtcpFeedback", [])
    for a_fb in codec_a.get("rtcpFeedback", []):
        match = next(
            (
                b_fb
                for b_fb in feedback_b
                if a_fb.get("type") == b_fb.get("type")
                and a_fb.get("parameter") == b_fb.get("parameter")
            ),
            None,
        )
        if match is not None:
            reduced.append(copy.deepcopy(match))
    return reduced


def reduce_codecs(codecs: list, cap_codec: Optional[dict] = None) -> list:
    """Keep one media codec (and its RTX codec) from ``codecs``.

    Without a capability codec the first one is taken; otherwise the first
    codec compatible with ``cap_codec``.
    """
    if not isinstance(cap_codec, dict):
        if not codecs:
            raise InvalidParameterError("no codecs given")
        filtered = [codecs[0]]
        if len(codecs) > 1 and is_rtx_codec(codecs[1]):
            filtered.append(codecs[1])
        return filtered

    for idx, codec in enumerate(codecs):
        if match_codecs(codec, cap_codec):
            filtered = [codec]
            if idx + 1 < len(codecs) and is_rtx_codec(codecs[idx + 1]):
                filtered.append(codecs[idx + 1])
            return filtered

    raise InvalidParameterError("no matching codec found")