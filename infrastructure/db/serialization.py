from __future__ import annotations

import json
import logging
from typing import Optional

from domain.models import SpinDetails


logger = logging.getLogger(__name__)


def encode_details(details: Optional[SpinDetails]) -> Optional[str]:
    if details is None:
        return None
    return json.dumps(details.to_dict(), ensure_ascii=False)


def decode_details(raw: Optional[str]) -> Optional[SpinDetails]:
    """
    Parse stored spin details.

    Unreadable payloads are treated as "no details" rather than failing
    the whole history read.
    """

    if not raw:
        return None
    try:
        return SpinDetails.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("Ignoring malformed transaction details: %s", exc)
        return None
