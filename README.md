# rtpnegotiate

Checks and negotiates the media parameters that a client exchanges with an
SFU (selective forwarding unit) router. It needs only the standard library.

Every parameter set is a plain `dict` (or `list`), laid out the way the router
sends it over the signalling channel as JSON.

## Modules

- `rtpnegotiate.rtp_validation` checks RTP capabilities, codec capabilities,
  RTCP feedback, header extensions, RTP parameters, codec parameters,
  encodings, RTCP parameters and producer codec options
  (`validate_rtp_capabilities`, `validate_rtp_parameters`,
  `validate_producer_codec_options` and the others). The dict is checked in
  place. Optional fields that are missing get their defaults written in, for
  example `channels: 1` for audio codecs, `parameter: ""` for RTCP feedback,
  `dtx: False` for encodings and `reducedSize: True` for RTCP.
- `rtpnegotiate.transport_validation` checks SCTP capabilities and
  parameters, SCTP stream parameters (filling in `ordered`,
  `maxPacketLifeTime`, `maxRetransmits`, `label` and `protocol`), ICE
  parameters and candidates, and DTLS fingerprints and parameters.
- `rtpnegotiate.capabilities` negotiates. `get_extended_rtp_capabilities`
  matches local capabilities against the router's, keeping the router's codec
  order and pairing RTX codecs and header extensions. From the result come
  `get_recv_rtp_capabilities`, `get_sending_rtp_parameters`,
  `get_sending_remote_rtp_parameters` (which keeps Transport-CC or REMB
  feedback depending on the header extensions), `generate_probator_rtp_parameters`,
  `can_send` and `can_receive`.
- `rtpnegotiate.codecs` matches codecs by MIME type, clock rate and channels
  (`match_codecs`). In strict mode it also compares H264 packetization mode
  and profile and VP9 profile; with `modify=True` it writes the negotiated
  H264 `profile-level-id` into both codecs. `reduce_codecs` picks one codec,
  plus the RTX codec that follows it, from a list. There are also
  `is_rtx_codec`, `match_header_extensions` and `reduce_rtcp_feedback`.
- `rtpnegotiate.h264` decodes and encodes H264 `profile-level-id` values
  (`parse_profile_level_id`, `profile_level_id_to_string`,
  `parse_sdp_profile_level_id`) into `ProfileLevelId` with a `Profile` and a
  `Level`, tells whether two parameter sets share a profile
  (`is_same_profile`), and works out the answer's level
  (`generate_profile_level_id_for_answer`).
- `rtpnegotiate.errors` holds the exceptions.

## Installing

```
pip install rtpnegotiate
```

## Example

```python
from rtpnegotiate.capabilities import (
    can_send,
    get_extended_rtp_capabilities,
    get_recv_rtp_capabilities,
    get_sending_rtp_parameters,
)
from rtpnegotiate.errors import InvalidParameterError

local_caps = {
    "codecs": [
        {"mimeType": "audio/opus", "preferredPayloadType": 100,
         "clockRate": 48000, "channels": 2},
    ],
}
router_caps = {
    "codecs": [
        {"mimeType": "audio/opus", "preferredPayloadType": 100,
         "clockRate": 48000, "channels": 2},
    ],
}

try:
    extended = get_extended_rtp_capabilities(local_caps, router_caps)
except InvalidParameterError as exc:
    raise SystemExit(f"bad capabilities: {exc}")

if can_send("audio", extended):
    params = get_sending_rtp_parameters("audio", extended)
    print(params["codecs"][0]["mimeType"])  # audio/opus

recv_caps = get_recv_rtp_capabilities(extended)
```

## Errors

All errors raised by the package derive from `NegotiationError`.
Validation failures raise `InvalidParameterError`, which is also a
`TypeError`.

## What it does not do

The package works on parameter dicts only. It does not open transports,
send or receive media, or read and write SDP. It does not parse
scalability mode strings such as `"L1T3"`: an encoding's `scalabilityMode`
is only checked to be a non-empty string.

## Running the tests

```
pip install -e .[test]
pytest
```