"""
Address heuristics used before a proposal is generated.

The site survey only stores a free-text address.  When the sales rep does
not pick a state explicitly, the two-letter state code is pulled from the
address so the engine can use the state's utility rate.
"""

from __future__ import annotations

import re

# Two letters standing alone, followed by a ZIP code or the end of the string.
_STATE_PATTERN = re.compile(r"\b([A-Z]{2})\b(?=\s*\d{5}|\s*$)", re.IGNORECASE)


def extract_state_code(address: str | None) -> str | None:
    """
    Return the upper-cased state code found in ``address``, or None.

    >>> extract_state_code("1 Main St, Austin, TX 78701")
    'TX'
    >>> extract_state_code("1 Main St, Springfield") is None
    True
    """
    if not address:
        return None
    match = _STATE_PATTERN.search(address)
    return match.group(1).upper() if match else None
