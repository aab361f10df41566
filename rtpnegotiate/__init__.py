"""Validation and negotiation of RTP, SCTP, ICE and DTLS parameters."""

__version__ = "3.4.0"

__all__ = [
    "capabilities",
    "codecs",
    "errors",
    "h264",
    "rtp_validation",
    "transport_validation",
]