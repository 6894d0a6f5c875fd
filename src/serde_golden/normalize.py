"""Line-break normalization for golden artifacts."""

from __future__ import annotations

_CRLF = b"\r\n"
_CR = b"\r"
_LF = b"\n"


def normalize_line_breaks(data: bytes) -> bytes:
    """Replace CRLF and lone CR line breaks with LF.

    Parameters
    ----------
    data
        Raw payload bytes.

    Returns
    -------
    bytes
        Payload using LF line breaks only.
    """
    if _CR not in data:
        return data
    return data.replace(_CRLF, _LF).replace(_CR, _LF)


__all__ = ["normalize_line_breaks"]
