import pytest

from rtpnegotiate.errors import InvalidParameterError, NegotiationError
from rtpnegotiate.transport_validation import (
    validate_dtls_fingerprint,
    validate_dtls_parameters,
    validate_ice_candidate,
    validate_ice_candidates,
    validate_ice_parameters,
    validate_num_sctp_streams,
    validate_sctp_capabilities,
    validate_sctp_parameters,
    validate_sctp_stream_parameters,
)


def _candidate(**overrides):
    candidate = {
        "foundation": "udpcandidate",
        "priority": 1078862079,
        "ip": "127.0.0.1",
        "protocol": "udp",
        "port": 40533,
        "type": "host",
    }
    candidate.update(overrides)
    return candidate


def _fingerprint():
    return {"algorithm": "sha-256", "value": "AA:BB:CC:DD"}


# SCTP capabilities


def test_sctp_capabilities_valid_is_unchanged():
    caps = {"numStreams": {"OS": 1024, "MIS": 1024}}
    validate_sctp_capabilities(caps)
    assert caps == {"numStreams": {"OS": 1024, "MIS": 1024}}


@pytest.mark.parametrize("caps", [[], {}, {"numStreams": 5}])
def test_sctp_capabilities_invalid(caps):
    with pytest.raises(InvalidParameterError):
        validate_sctp_capabilities(caps)


def test_sctp_capabilities_checks_num_streams():
    with pytest.raises(InvalidParameterError, match="numStreams.MIS"):
        validate_sctp_capabilities({"numStreams": {"OS": 10}})


@pytest.mark.parametrize(
    "num_streams, message",
    [
        ({"MIS": 1}, "numStreams.OS"),
        ({"OS": 1}, "numStreams.MIS"),
        ({"OS": True, "MIS": 1}, "numStreams.OS"),
        ({"OS": 1, "MIS": "1"}, "numStreams.MIS"),
    ],
)
def test_num_sctp_streams_invalid(num_streams, message):
    with pytest.raises(InvalidParameterError, match=message):
        validate_num_sctp_streams(num_streams)


# SCTP parameters


def test_sctp_parameters_valid():
    params = {"port": 5000, "OS": 1024, "MIS": 1024, "maxMessageSize": 262144}
    validate_sctp_parameters(params)
    assert params["maxMessageSize"] == 262144


@pytest.mark.parametrize("missing", ["port", "OS", "MIS", "maxMessageSize"])
def test_sctp_parameters_missing_field(missing):
    params = {"port": 5000, "OS": 1024, "MIS": 1024, "maxMessageSize": 262144}
    del params[missing]
    with pytest.raises(InvalidParameterError, match=f"missing params.{missing}"):
        validate_sctp_parameters(params)


# SCTP stream parameters


def test_sctp_stream_parameters_defaults():
    params = {"streamId": 1}
    validate_sctp_stream_parameters(params)
    assert params["ordered"] is True
    assert params["maxPacketLifeTime"] == 0
    assert params["maxRetransmits"] == 0
    assert params["label"] == ""
    assert params["protocol"] == ""


def test_sctp_stream_parameters_unreliable_becomes_unordered():
    params = {"streamId": 1, "maxRetransmits": 3}
    validate_sctp_stream_parameters(params)
    assert params["ordered"] is False
    assert params["maxRetransmits"] == 3
    assert params["maxPacketLifeTime"] == 0


def test_sctp_stream_parameters_explicit_unordered_kept():
    params = {"streamId": 1, "ordered": False, "maxPacketLifeTime": 100}
    validate_sctp_stream_parameters(params)
    assert params["ordered"] is False
    assert params["maxPacketLifeTime"] == 100


def test_sctp_stream_parameters_keeps_label_and_protocol():
    params = {"streamId": 2, "label": "chat", "protocol": "proto"}
    validate_sctp_stream_parameters(params)
    assert params["label"] == "chat"
    assert params["protocol"] == "proto"


def test_sctp_stream_parameters_missing_stream_id():
    with pytest.raises(InvalidParameterError, match="streamId"):
        validate_sctp_stream_parameters({})


def test_sctp_stream_parameters_both_limits():
    params = {"streamId": 1, "maxPacketLifeTime": 10, "maxRetransmits": 2}
    with pytest.raises(InvalidParameterError, match="both"):
        validate_sctp_stream_parameters(params)


def test_sctp_stream_parameters_ordered_with_limit():
    params = {"streamId": 1, "ordered": True, "maxRetransmits": 2}
    with pytest.raises(InvalidParameterError, match="cannot be ordered"):
        validate_sctp_stream_parameters(params)


# ICE parameters


def test_ice_parameters_default_ice_lite():
    params = {"usernameFragment": "frag", "password": "password"}
    validate_ice_parameters(params)
    assert params["iceLite"] is False


def test_ice_parameters_keeps_ice_lite():
    params = {"usernameFragment": "frag", "password": "password", "iceLite": True}
    validate_ice_parameters(params)
    assert params["iceLite"] is True


@pytest.mark.parametrize(
    "params, message",
    [
        ({"password": "password"}, "usernameFragment"),
        ({"usernameFragment": "", "password": "password"}, "usernameFragment"),
        ({"usernameFragment": "frag"}, "params.password"),
        ({"usernameFragment": "frag", "password": ""}, "params.password"),
    ],
)
def test_ice_parameters_invalid(params, message):
    with pytest.raises(InvalidParameterError, match=message):
        validate_ice_parameters(params)


# ICE candidates


def test_ice_candidate_valid_case_insensitive():
    candidate = _candidate(protocol="TCP", type="Relay")
    validate_ice_candidate(candidate)
    assert candidate == _candidate(protocol="TCP", type="Relay")


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"foundation": ""}, "missing params.foundation"),
        ({"priority": -1}, "missing params.priority"),
        ({"ip": ""}, "missing params.ip"),
        ({"protocol": ""}, "missing params.protocol"),
        ({"protocol": "sctp"}, "invalid params.protocol"),
        ({"port": "40533"}, "missing params.port"),
        ({"type": ""}, "missing params.type"),
        ({"type": "hostile"}, "invalid params.type"),
    ],
)
def test_ice_candidate_invalid(overrides, message):
    with pytest.raises(InvalidParameterError, match=message):
        validate_ice_candidate(_candidate(**overrides))


def test_ice_candidates_requires_list():
    with pytest.raises(InvalidParameterError, match="not an array"):
        validate_ice_candidates(_candidate())


def test_ice_candidates_validates_each():
    with pytest.raises(InvalidParameterError, match="invalid params.type"):
        validate_ice_candidates([_candidate(), _candidate(type="nope")])


def test_ice_candidates_valid_list():
    candidates = [_candidate(), _candidate(type="srflx")]
    validate_ice_candidates(candidates)
    assert [c["type"] for c in candidates] == ["host", "srflx"]


# DTLS


def test_dtls_fingerprint_invalid():
    with pytest.raises(InvalidParameterError, match="algorithm"):
        validate_dtls_fingerprint({"value": "AA"})
    with pytest.raises(InvalidParameterError, match="params.value"):
        validate_dtls_fingerprint({"algorithm": "sha-256", "value": ""})


@pytest.mark.parametrize("role", ["auto", "client", "SERVER"])
def test_dtls_parameters_valid_roles(role):
    params = {"role": role, "fingerprints": [_fingerprint()]}
    validate_dtls_parameters(params)
    assert params["role"] == role


@pytest.mark.parametrize(
    "params, message",
    [
        ({"fingerprints": []}, "missing params.role"),
        ({"role": "peer", "fingerprints": []}, "invalid params.role"),
        ({"role": "auto"}, "missing params.fingerprints"),
        ({"role": "auto", "fingerprints": []}, "missing params.fingerprints"),
        ({"role": "auto", "fingerprints": [{"algorithm": "sha-256"}]}, "params.value"),
    ],
)
def test_dtls_parameters_invalid(params, message):
    with pytest.raises(InvalidParameterError, match=message):
        validate_dtls_parameters(params)


def test_errors_share_base_class():
    with pytest.raises(NegotiationError):
        validate_dtls_parameters("not a dict")