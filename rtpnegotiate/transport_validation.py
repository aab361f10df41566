"""Validation of SCTP, ICE and DTLS transport parameters.

Every validator checks a JSON-like dict (or list) in place. Where the field is
optional and missing, it adds the field with its default value. Malformed
input raises :class:`InvalidParameterError`.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import InvalidParameterError

_PROTOCOL_RE = re.compile(r"udp|tcp", re.IGNORECASE)
_CANDIDATE_TYPE_RE = re.compile(r"host|srflx|prflx|relay", re.IGNORECASE)
_DTLS_ROLE_RE = re.compile(r"auto|client|server", re.IGNORECASE)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_unsigned(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _require_object(value: Any, name: str) -> None:
    if not isinstance(value, dict):
        raise InvalidParameterError(f"{name} is not an object")


def validate_sctp_capabilities(caps: Any) -> None:
    """Validate SctpCapabilities."""
    _require_object(caps, "caps")

    num_streams = caps.get("numStreams")
    if not isinstance(num_streams, dict):
        raise InvalidParameterError("missing caps.numStreams")

    validate_num_sctp_streams(num_streams)


def validate_num_sctp_streams(num_streams: Any) -> None:
    """Validate NumSctpStreams: both ``OS`` and ``MIS`` are mandatory integers."""
    _require_object(num_streams, "numStreams")

    for name in ("OS", "MIS"):
        if not _is_int(num_streams.get(name)):
            raise InvalidParameterError(f"missing numStreams.{name}")


def validate_sctp_parameters(params: Any) -> None:
    """Validate SctpParameters."""
    _require_object(params, "params")

    for name in ("port", "OS", "MIS", "maxMessageSize"):
        if not _is_int(params.get(name)):
            raise InvalidParameterError(f"missing params.{name}")


def validate_sctp_stream_parameters(params: Any) -> None:
    """Validate SctpStreamParameters, filling in reliability defaults."""
    _require_object(params, "params")

    if not _is_int(params.get("streamId")):
        raise InvalidParameterError("missing params.streamId")

    has_lifetime = "maxPacketLifeTime" in params
    has_retransmits = "maxRetransmits" in params

    ordered_given = isinstance(params.get("ordered"), bool)
    if not ordered_given:
        params["ordered"] = True

    if not _is_int(params.get("maxPacketLifeTime")):
        params["maxPacketLifeTime"] = 0

    if not _is_int(params.get("maxRetransmits")):
        params["maxRetransmits"] = 0

    if has_lifetime and has_retransmits:
        raise InvalidParameterError(
            "cannot provide both maxPacketLifeTime and maxRetransmits"
        )

    unreliable = has_lifetime or has_retransmits
    if ordered_given and params["ordered"] is True and unreliable:
        raise InvalidParameterError(
            "cannot be ordered with maxPacketLifeTime or maxRetransmits"
        )
    if not ordered_given and unreliable:
        params["ordered"] = False

    if not isinstance(params.get("label"), str):
        params["label"] = ""

    if not isinstance(params.get("protocol"), str):
        params["protocol"] = ""


def validate_ice_parameters(params: Any) -> None:
    """Validate IceParameters; ``iceLite`` defaults to False."""
    _require_object(params, "params")

    if not _is_nonempty_str(params.get("usernameFragment")):
        raise InvalidParameterError("missing params.usernameFragment")

    if not _is_nonempty_str(params.get("password")):
        raise InvalidParameterError("missing params.password")

    if not isinstance(params.get("iceLite"), bool):
        params["iceLite"] = False


def validate_ice_candidate(params: Any) -> None:
    """Validate a single IceCandidate."""
    _require_object(params, "params")

    if not _is_nonempty_str(params.get("foundation")):
        raise InvalidParameterError("missing params.foundation")

    if not _is_unsigned(params.get("priority")):
        raise InvalidParameterError("missing params.priority")

    if not _is_nonempty_str(params.get("ip")):
        raise InvalidParameterError("missing params.ip")

    protocol = params.get("protocol")
    if not _is_nonempty_str(protocol):
        raise InvalidParameterError("missing params.protocol")
    if _PROTOCOL_RE.fullmatch(protocol) is None:
        raise InvalidParameterError("invalid params.protocol")

    if not _is_unsigned(params.get("port")):
        raise InvalidParameterError("missing params.port")

    candidate_type = params.get("type")
    if not _is_nonempty_str(candidate_type):
        raise InvalidParameterError("missing params.type")
    if _CANDIDATE_TYPE_RE.fullmatch(candidate_type) is None:
        raise InvalidParameterError("invalid params.type")


def validate_ice_candidates(params: Any) -> None:
    """Validate a list of IceCandidates."""
    if not isinstance(params, list):
        raise InvalidParameterError("params is not an array")

    for candidate in params:
        validate_ice_candidate(candidate)


def validate_dtls_fingerprint(params: Any) -> None:
    """Validate a DtlsFingerprint."""
    _require_object(params, "params")

    if not _is_nonempty_str(params.get("algorithm")):
        raise InvalidParameterError("missing params.algorithm")

    if not _is_nonempty_str(params.get("value")):
        raise InvalidParameterError("missing params.value")


def validate_dtls_parameters(params: Any) -> None:
    """Validate DtlsParameters."""
    _require_object(params, "params")

    role = params.get("role")
    if not _is_nonempty_str(role):
        raise InvalidParameterError("missing params.role")
    if _DTLS_ROLE_RE.fullmatch(role) is None:
        raise InvalidParameterError("invalid params.role")

    fingerprints = params.get("fingerprints")
    if not isinstance(fingerprints, list) or not fingerprints:
        raise InvalidParameterError("missing params.fingerprints")

    for fingerprint in fingerprints:
        validate_dtls_fingerprint(fingerprint)