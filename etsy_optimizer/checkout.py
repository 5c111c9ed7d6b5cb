"""
checkout.py — Hosted payment links and the post-payment return URL.

The payment page redirects back with `?plan=pro|lifetime`. confirm_upgrade()
applies that plan once and hands back the URL without the parameter, so
reopening the cleaned URL can't upgrade twice.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .models import PAID_PLANS
from .usage import UsageStore

logger = logging.getLogger(__name__)

PAYMENT_LINKS = {
    "pro": "https://buy.stripe.com/9B6fZa8AtcWIeZKfgQ3gk01",
    "lifetime": "https://buy.stripe.com/fZu9AM6slaOA3h27Oo3gk02",
}

PRICES = {
    "pro": "Pro Monthly, $9/month",
    "lifetime": "Lifetime Access, $49 once",
}

_RETURN_PARAMS = ("plan", "session_id")


def checkout_url(plan: str) -> str:
    if plan not in PAYMENT_LINKS:
        raise ValueError(f"No payment link for plan {plan!r}")
    return PAYMENT_LINKS[plan]


def confirm_upgrade(url: str, store: UsageStore) -> Tuple[Optional[str], str]:
    """
    Apply the plan named in `url`'s `plan` query parameter.

    Returns (plan, cleaned_url). When the URL carries no recognised plan the
    store is untouched and (None, url) is returned.
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    plan = next((value for key, value in query if key == "plan"), None)
    if plan not in PAID_PLANS:
        return None, url

    store.upgrade(plan)
    logger.info(f"Checkout confirmed for plan {plan}")

    kept = [(key, value) for key, value in query if key not in _RETURN_PARAMS]
    cleaned = urlunsplit(parts._replace(query=urlencode(kept)))
    return plan, cleaned
