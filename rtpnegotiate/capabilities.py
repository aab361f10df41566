"""Negotiation of RTP capabilities between a local endpoint and a remote router."""

from __future__ import annotations

import copy
from typing import Any

from .codecs import is_rtx_codec, match_codecs, match_header_extensions, reduce_rtcp_feedback
from .errors import InvalidParameterError
from .rtp_validation import validate_rtp_capabilities, validate_rtp_parameters

PROBATOR_SSRC = 1234
PROBATOR_MID = "probator"

ABS_SEND_TIME_URI = "http://www.webrtc.org/experiments/rtp-hdrext/abs-send-time"
TRANSPORT_CC_URI = "http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01"

_ANSWER_DIRECTIONS = {
    "sendrecv": "sendrecv",
    "recvonly": "sendonly",
    "sendonly": "recvonly",
    "inactive": "inactive",
}


def _find(items, predicate):
    return next((item for item in items if predicate(item)), None)


def get_extended_rtp_capabilities(local_caps: dict, remote_caps: dict) -> dict:
    """Match local and remote capabilities; both are validated in place first."""
    validate_rtp_capabilities(local_caps)
    validate_rtp_capabilities(remote_caps)

    codecs: list = []
    headers: list = []
    local_codecs = local_caps["codecs"]

    for remote_codec in remote_caps["codecs"]:
        if is_rtx_codec(remote_codec):
            continue

        local_codec = _find(
            local_codecs,
            lambda c: match_codecs(c, remote_codec, strict=True, modify=True),
        )
        if local_codec is None:
            continue

        extended = {
            "mimeType": local_codec["mimeType"],
            "kind": local_codec["kind"],
            "clockRate": local_codec["clockRate"],
            "localPayloadType": local_codec.get("preferredPayloadType"),
            "localRtxPayloadType": None,
            "remotePayloadType": remote_codec.get("preferredPayloadType"),
            "remoteRtxPayloadType": None,
            "localParameters": copy.deepcopy(local_codec["parameters"]),
            "remoteParameters": copy.deepcopy(remote_codec["parameters"]),
            "rtcpFeedback": reduce_rtcp_feedback(local_codec, remote_codec),
        }
        if "channels" in local_codec:
            extended["channels"] = local_codec["channels"]
        codecs.append(extended)

    for extended in codecs:
        local_rtx = _find(
            local_codecs,
            lambda c: is_rtx_codec(c)
            and c["parameters"].get("apt") == extended["localPayloadType"],
        )
        if local_rtx is None:
            continue
        remote_rtx = _find(
            remote_caps["codecs"],
            lambda c: is_rtx_codec(c)
            and c["parameters"].get("apt") == extended["remotePayloadType"],
        )
        if remote_rtx is None:
            continue
        extended["localRtxPayloadType"] = local_rtx.get("preferredPayloadType")
        extended["remoteRtxPayloadType"] = remote_rtx.get("preferredPayloadType")

    for remote_ext in remote_caps["headerExtensions"]:
        local_ext = _find(
            local_caps["headerExtensions"],
            lambda e: match_header_extensions(e, remote_ext),
        )
        if local_ext is None:
            continue

        extended_ext = {
            "kind": remote_ext["kind"],
            "uri": remote_ext["uri"],
            "sendId": local_ext["preferredId"],
            "recvId": remote_ext["preferredId"],
            "encrypt": local_ext["preferredEncrypt"],
        }
        direction = _ANSWER_DIRECTIONS.get(remote_ext["direction"])
        if direction is not None:
            extended_ext["direction"] = direction
        headers.append(extended_ext)

    return {"codecs": codecs, "headerExtensions": headers}


def get_recv_rtp_capabilities(extended_rtp_capabilities: dict) -> dict:
    """RTP capabilities for receiving media."""
    codecs: list = []
    headers: list = []

    for extended in extended_rtp_capabilities["codecs"]:
        codec = {
            "mimeType": extended["mimeType"],
            "kind": extended["kind"],
            "preferredPayloadType": extended["remotePayloadType"],
            "clockRate": extended["clockRate"],
            "parameters": copy.deepcopy(extended["localParameters"]),
            "rtcpFeedback": copy.deepcopy(extended["rtcpFeedback"]),
        }
        if "channels" in extended:
            codec["channels"] = extended["channels"]
        codecs.append(codec)

        if extended.get("remoteRtxPayloadType") is None:
            continue

        codecs.append(
            {
                "mimeType": f"{extended['kind']}/rtx",
                "kind": extended["kind"],
                "preferredPayloadType": extended["remoteRtxPayloadType"],
                "clockRate": extended["clockRate"],
                "parameters": {"apt": extended["remotePayloadType"]},
                "rtcpFeedback": [],
            }
        )

    for extended_ext in extended_rtp_capabilities["headerExtensions"]:
        direction = extended_ext.get("direction")
        if direction not in ("sendrecv", "recvonly"):
            continue
        headers.append(
            {
                "kind": extended_ext["kind"],
                "uri": extended_ext["uri"],
                "preferredId": extended_ext["recvId"],
                "preferredEncrypt": extended_ext["encrypt"],
                "direction": direction,
            }
        )

    return {"codecs": codecs, "headerExtensions": headers}


def _sending_rtp_parameters(kind: str, extended_rtp_capabilities: dict, parameters_key: str) -> dict:
    rtp_parameters: dict[str, Any] = {
        "mid": None,
        "codecs": [],
        "headerExtensions": [],
        "encodings": [],
        "rtcp": {},
    }

    extended = _find(extended_rtp_capabilities["codecs"], lambda c: c["kind"] == kind)
    if extended is not None:
        codec = {
            "mimeType": extended["mimeType"],
            "payloadType": extended["localPayloadType"],
            "clockRate": extended["clockRate"],
            "parameters": copy.deepcopy(extended[parameters_key]),
            "rtcpFeedback": copy.deepcopy(extended["rtcpFeedback"]),
        }
        if "channels" in extended:
            codec["channels"] = extended["channels"]
        rtp_parameters["codecs"].append(codec)

        if extended.get("localRtxPayloadType") is not None:
            rtp_parameters["codecs"].append(
                {
                    "mimeType": f"{extended['kind']}/rtx",
                    "payloadType": extended["localRtxPayloadType"],
                    "clockRate": extended["clockRate"],
                    "parameters": {"apt": extended["localPayloadType"]},
                    "rtcpFeedback": [],
                }
            )

    for extended_ext in extended_rtp_capabilities["headerExtensions"]:
        if extended_ext["kind"] != kind:
            continue
        if extended_ext.get("direction") not in ("sendrecv", "sendonly"):
            continue
        rtp_parameters["headerExtensions"].append(
            {
                "uri": extended_ext["uri"],
                "id": extended_ext["sendId"],
                "encrypt": extended_ext["encrypt"],
                "parameters": {},
            }
        )

    return rtp_parameters


def get_sending_rtp_parameters(kind: str, extended_rtp_capabilities: dict) -> dict:
    """RTP parameters for sending media of ``kind``: first media codec plus RTX.

    ``mid``, ``encodings`` and ``rtcp`` are left empty.
    """
    return _sending_rtp_parameters(kind, extended_rtp_capabilities, "localParameters")


def get_sending_remote_rtp_parameters(kind: str, extended_rtp_capabilities: dict) -> dict:
    """RTP parameters for sending media as seen by the remote side.

    RTCP feedback keeps Transport-CC when its header extension is present,
    REMB when only abs-send-time is, and neither otherwise.
    """
    rtp_parameters = _sending_rtp_parameters(kind, extended_rtp_capabilities, "remoteParameters")
    uris = {ext["uri"] for ext in rtp_parameters["headerExtensions"]}

    if TRANSPORT_CC_URI in uris:
        dropped = {"goog-remb"}
    elif ABS_SEND_TIME_URI in uris:
        dropped = {"transport-cc"}
    else:
        dropped = {"transport-cc", "goog-remb"}

    for codec in rtp_parameters["codecs"]:
        codec["rtcpFeedback"] = [
            fb for fb in codec["rtcpFeedback"] if fb.get("type") not in dropped
        ]

    return rtp_parameters


def generate_probator_rtp_parameters(video_rtp_parameters: dict) -> dict:
    """RTP parameters for the bandwidth probator consumer."""
    validated = copy.deepcopy(video_rtp_parameters)
    validate_rtp_parameters(validated)

    if not validated["codecs"]:
        raise InvalidParameterError("params.codecs is empty")

    return {
        "mid": PROBATOR_MID,
        "codecs": [validated["codecs"][0]],
        "headerExtensions": [
            ext
            for ext in validated["headerExtensions"]
            if ext["uri"] in (ABS_SEND_TIME_URI, TRANSPORT_CC_URI)
        ],
        "encodings": [{"ssrc": PROBATOR_SSRC}],
        "rtcp": {"cname": "probator"},
    }


def can_send(kind: str, extended_rtp_capabilities: dict) -> bool:
    """Whether media of ``kind`` can be sent."""
    return any(codec["kind"] == kind for codec in extended_rtp_capabilities["codecs"])


def can_receive(rtp_parameters: dict, extended_rtp_capabilities: dict) -> bool:
    """Whether the given RTP parameters can be received; they are validated in place."""
    validate_rtp_parameters(rtp_parameters)

    if not rtp_parameters["codecs"]:
        return False

    payload_type = rtp_parameters["codecs"][0]["payloadType"]
    return any(
        codec.get("remotePayloadType") == payload_type
        for codec in extended_rtp_capabilities["codecs"]
    )