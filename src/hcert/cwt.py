"""CWT claims for health certificates.

The health certificate payload travels as an opaque value under the claim
map entry ``claims[-260][1]``; the codec never looks inside it.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from . import cbor_utils
from .errors import MissingHealthClaimError

CWT_ISSUER = 1
CWT_SUBJECT = 2
CWT_AUDIENCE = 3
CWT_EXPIRATION = 4
CWT_NOT_BEFORE = 5
CWT_ISSUED_AT = 6
CWT_ID = 7
CWT_HCERT = -260
CWT_HCERT_V1 = 1


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, rolling overflowing days into the next month.

    31 January plus one month is 3 March (2 March in leap years).
    """
    month_index = moment.month - 1 + months
    first_of_month = moment.replace(
        year=moment.year + month_index // 12, month=month_index % 12 + 1, day=1
    )
    return first_of_month + timedelta(days=moment.day - 1)


def _epoch_seconds(moment: datetime) -> int:
    # Half seconds round up, never to even.
    return math.floor(moment.timestamp() + 0.5)


def make_cwt(
    payload: Any,
    months_to_expire: Optional[int] = None,
    issuer: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict[int, Any]:
    """Wrap a health certificate payload in a CWT claim map.

    Args:
        payload: Health certificate content, carried as-is
        months_to_expire: When given, expiration is issued-at plus this many months
        issuer: When given, stored as the iss claim
        now: Issuance time, defaults to the current UTC time

    Returns:
        Claim map with integer labels
    """
    issued_at = now or datetime.now(timezone.utc)

    claims: dict[int, Any] = {CWT_ISSUED_AT: _epoch_seconds(issued_at)}

    if months_to_expire:
        claims[CWT_EXPIRATION] = _epoch_seconds(add_months(issued_at, months_to_expire))

    if issuer:
        claims[CWT_ISSUER] = issuer

    claims[CWT_HCERT] = {CWT_HCERT_V1: payload}
    return claims


def parse_cwt(claims: Any) -> Any:
    """Return the health certificate payload from a claim map.

    Raises:
        MissingHealthClaimError: If claims[-260][1] is absent
    """
    if not cbor_utils.is_map(claims):
        raise MissingHealthClaimError(f"Claims are not a map: {type(claims).__name__}")

    hcert = claims.get(CWT_HCERT)
    if not cbor_utils.is_map(hcert) or CWT_HCERT_V1 not in hcert:
        raise MissingHealthClaimError("No health certificate claim under -260/1")

    return hcert[CWT_HCERT_V1]
