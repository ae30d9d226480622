"""Shared-PIN gate.

The candidate is compared with the ``value`` field of the ``pin/default``
document. A wrong value and a missing document produce the same
"Invalid PIN" result; any store error fails closed with "Error verifying PIN".
There is no lockout or attempt counting.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from pinnotes.storage.document_store import StoreError
from pinnotes.storage.pin_store import PinStore

logger = logging.getLogger(__name__)

INVALID_PIN = "Invalid PIN"
VERIFY_ERROR = "Error verifying PIN"


@dataclass(frozen=True)
class PinResult:
    ok: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


class PinGate:
    def __init__(self, pins: PinStore):
        self.pins = pins

    async def verify(self, candidate: str) -> PinResult:
        try:
            stored = await self.pins.get_pin()
        except StoreError:
            logger.exception("Error verifying PIN")
            return PinResult(ok=False, error=VERIFY_ERROR)

        if stored is None or candidate is None:
            return PinResult(ok=False, error=INVALID_PIN)

        # exact match, constant-time
        if hmac.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8")):
            return PinResult(ok=True)
        return PinResult(ok=False, error=INVALID_PIN)
