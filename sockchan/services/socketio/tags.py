"""Channel tag extraction for payloads wrapped by non-standard servers.

Some servers send emits as ``"orders",{...}`` instead of plain JSON. The
leading quoted identifier is the channel tag; everything from the first
``{`` or ``[`` onwards is the real payload.
"""

import re
from typing import TypeVar

T = TypeVar("T", str, bytes)

_STRUCTURAL = re.compile("[{[]")
_STRUCTURAL_BYTES = re.compile(b"[{[]")


def extract_channel_tag(payload: T) -> tuple[T, T]:
    """Split a possibly wrapped payload into ``(channel_tag, args)``.

    Args:
        payload: Raw JSON text or bytes as received.

    Returns:
        The channel tag (empty when there is none) and the payload with the
        wrapper removed. Payloads that already start with ``{`` or ``[``, or
        contain neither, are returned unchanged.
    """
    empty = payload[:0]
    pattern = _STRUCTURAL_BYTES if isinstance(payload, bytes) else _STRUCTURAL

    match = pattern.search(payload)
    if match is None or match.start() == 0:
        return empty, payload

    idx = match.start()
    quote = b'"' if isinstance(payload, bytes) else '"'
    end = payload[1:idx].find(quote)
    if end <= 0:
        # Malformed wrapper, the JSON tail is still usable
        return empty, payload[idx:]

    return payload[1 : 1 + end], payload[idx:]
