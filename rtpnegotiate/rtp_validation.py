"""Validation of RTP capabilities, RTP parameters and producer codec options.

Every validator checks a JSON-like dict (or list) in place. Where the field is
optional and missing, it adds the field with its default value. Malformed
input raises :class:`InvalidParameterError`.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import InvalidParameterError

_MIME_TYPE_RE = re.compile(r"(audio|video)/(.+)", re.IGNORECASE)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_unsigned(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _require_object(value: Any, name: str) -> None:
    if not isinstance(value, dict):
        raise InvalidParameterError(f"{name} is not an object")


def _match_mime_type(codec: dict) -> str:
    mime_type = codec.get("mimeType")
    if not isinstance(mime_type, str):
        raise InvalidParameterError("missing codec.mimeType")
    match = _MIME_TYPE_RE.fullmatch(mime_type)
    if match is None:
        raise InvalidParameterError("invalid codec.mimeType")
    return match.group(1)


def _validate_codec_tail(codec: dict, kind: str) -> None:
    """Shared handling of channels, parameters and rtcpFeedback."""
    if kind == "audio":
        if not _is_int(codec.get("channels")):
            codec["channels"] = 1
    else:
        codec.pop("channels", None)

    if not isinstance(codec.get("parameters"), dict):
        codec["parameters"] = {}

    for key, value in codec["parameters"].items():
        if not isinstance(value, str) and not _is_number(value) and value is not None:
            raise InvalidParameterError("invalid codec parameter")
        if key == "apt" and not _is_int(value):
            raise InvalidParameterError("invalid codec apt parameter")

    if not isinstance(codec.get("rtcpFeedback"), list):
        codec["rtcpFeedback"] = []

    for fb in codec["rtcpFeedback"]:
        validate_rtcp_feedback(fb)


def _ensure_list(container: dict, key: str, name: str) -> list:
    if key in container:
        if not isinstance(container[key], list):
            raise InvalidParameterError(f"{name}.{key} is not an array")
    else:
        container[key] = []
    return container[key]


def validate_rtp_capabilities(caps: Any) -> None:
    """Validate RtpCapabilities, filling in missing codecs and headerExtensions."""
    _require_object(caps, "caps")

    for codec in _ensure_list(caps, "codecs", "caps"):
        validate_rtp_codec_capability(codec)

    for ext in _ensure_list(caps, "headerExtensions", "caps"):
        validate_rtp_header_extension(ext)


def validate_rtp_codec_capability(codec: Any) -> None:
    """Validate an RtpCodecCapability; sets ``kind`` from the mimeType."""
    _require_object(codec, "codec")

    kind = _match_mime_type(codec)
    codec["kind"] = kind

    if "preferredPayloadType" in codec and not _is_int(codec["preferredPayloadType"]):
        raise InvalidParameterError("invalid codec.preferredPayloadType")

    if not _is_int(codec.get("clockRate")):
        raise InvalidParameterError("missing codec.clockRate")

    _validate_codec_tail(codec, kind)


def validate_rtcp_feedback(fb: Any) -> None:
    """Validate an RtcpFeedback entry; ``parameter`` defaults to an empty string."""
    _require_object(fb, "fb")

    if not isinstance(fb.get("type"), str):
        raise InvalidParameterError("missing fb.type")

    if not isinstance(fb.get("parameter"), str):
        fb["parameter"] = ""


def validate_rtp_header_extension(ext: Any) -> None:
    """Validate an RtpHeaderExtension capability."""
    _require_object(ext, "ext")

    kind = ext.get("kind")
    if not isinstance(kind, str):
        raise InvalidParameterError("missing ext.kind")
    if kind not in ("audio", "video"):
        raise InvalidParameterError("invalid ext.kind")

    if not _is_nonempty_str(ext.get("uri")):
        raise InvalidParameterError("missing ext.uri")

    if not _is_int(ext.get("preferredId")):
        raise InvalidParameterError("missing ext.preferredId")

    if "preferredEncrypt" in ext:
        if not isinstance(ext["preferredEncrypt"], bool):
            raise InvalidParameterError("invalid ext.preferredEncrypt")
    else:
        ext["preferredEncrypt"] = False

    if "direction" in ext:
        if not isinstance(ext["direction"], str):
            raise InvalidParameterError("invalid ext.direction")
    else:
        ext["direction"] = "sendrecv"


def validate_rtp_parameters(params: Any) -> None:
    """Validate RtpParameters, filling in optional lists and the rtcp object."""
    _require_object(params, "params")

    if "mid" in params and not _is_nonempty_str(params["mid"]):
        raise InvalidParameterError("params.mid is not a string")

    codecs = params.get("codecs")
    if not isinstance(codecs, list):
        raise InvalidParameterError("missing params.codecs")
    for codec in codecs:
        validate_rtp_codec_parameters(codec)

    for ext in _ensure_list(params, "headerExtensions", "params"):
        validate_rtp_header_extension_parameters(ext)

    for encoding in _ensure_list(params, "encodings", "params"):
        validate_rtp_encoding_parameters(encoding)

    if "rtcp" in params:
        if not isinstance(params["rtcp"], dict):
            raise InvalidParameterError("params.rtcp is not an object")
    else:
        params["rtcp"] = {}

    validate_rtcp_parameters(params["rtcp"])


def validate_rtp_codec_parameters(codec: Any) -> None:
    """Validate RtpCodecParameters."""
    _require_object(codec, "codec")

    kind = _match_mime_type(codec)

    if not _is_int(codec.get("payloadType")):
        raise InvalidParameterError("missing codec.payloadType")

    if not _is_int(codec.get("clockRate")):
        raise InvalidParameterError("missing codec.clockRate")

    _validate_codec_tail(codec, kind)


def validate_rtp_header_extension_parameters(ext: Any) -> None:
    """Validate RtpHeaderExtensionParameters."""
    _require_object(ext, "ext")

    if not _is_nonempty_str(ext.get("uri")):
        raise InvalidParameterError("missing ext.uri")

    if not _is_int(ext.get("id")):
        raise InvalidParameterError("missing ext.id")

    if "encrypt" in ext:
        if not isinstance(ext["encrypt"], bool):
            raise InvalidParameterError("invalid ext.encrypt")
    else:
        ext["encrypt"] = False

    if not isinstance(ext.get("parameters"), dict):
        ext["parameters"] = {}

    for value in ext["parameters"].values():
        if not isinstance(value, str) and not _is_number(value):
            raise InvalidParameterError("invalid header extension parameter")


def validate_rtp_encoding_parameters(encoding: Any) -> None:
    """Validate RtpEncodingParameters; ``dtx`` defaults to False."""
    _require_object(encoding, "encoding")

    if "ssrc" in encoding and not _is_int(encoding["ssrc"]):
        raise InvalidParameterError("invalid encoding.ssrc")

    if "rid" in encoding and not _is_nonempty_str(encoding["rid"]):
        raise InvalidParameterError("invalid encoding.rid")

    if "rtx" in encoding:
        rtx = encoding["rtx"]
        if not isinstance(rtx, dict):
            raise InvalidParameterError("invalid encoding.rtx")
        if not _is_int(rtx.get("ssrc")):
            raise InvalidParameterError("missing encoding.rtx.ssrc")

    if not isinstance(encoding.get("dtx"), bool):
        encoding["dtx"] = False

    if "scalabilityMode" in encoding and not _is_nonempty_str(encoding["scalabilityMode"]):
        raise InvalidParameterError("invalid encoding.scalabilityMode")


def validate_rtcp_parameters(rtcp: Any) -> None:
    """Validate RtcpParameters; ``reducedSize`` defaults to True."""
    _require_object(rtcp, "rtcp")

    if "cname" in rtcp and not isinstance(rtcp["cname"], str):
        raise InvalidParameterError("invalid rtcp.cname")

    if not isinstance(rtcp.get("reducedSize"), bool):
        rtcp["reducedSize"] = True


_BOOLEAN_OPTIONS = ("opusStereo", "opusFec", "opusDtx", "opusCbr")
_UNSIGNED_OPTIONS = ("opusMaxPlaybackRate", "opusMaxAverageBitrate")
_INTEGER_OPTIONS = (
    "opusPtime",
    "videoGoogleStartBitrate",
    "videoGoogleMaxBitrate",
    "videoGoogleMinBitrate",
)


def validate_producer_codec_options(params: Any) -> None:
    """Validate the codec options given when producing media."""
    _require_object(params, "params")

    checks = (
        (_BOOLEAN_OPTIONS, lambda v: isinstance(v, bool)),
        (_UNSIGNED_OPTIONS, _is_unsigned),
        (_INTEGER_OPTIONS, _is_int),
    )
    for names, is_valid in checks:
        for name in names:
            if name in params and not is_valid(params[name]):
                raise InvalidParameterError(f"invalid params.{name}")