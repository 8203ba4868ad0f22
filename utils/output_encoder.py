"""
Output encoding for every string that leaves the service.

Generated email bodies, error messages and debug text are all treated as
untrusted and HTML-entity escaped before serialization.
"""

import html
from typing import Iterable, List, Optional


def encode_for_transport(text: Optional[str]) -> str:
    """Escape &, <, >, double and single quotes as HTML entities."""
    if text is None:
        return ""
    return html.escape(text, quote=True)


def encode_messages(messages: Iterable[str]) -> List[str]:
    return [encode_for_transport(message) for message in messages]
