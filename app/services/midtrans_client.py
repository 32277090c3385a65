"""
Midtrans Snap Client

Snap is Midtrans' hosted checkout: we POST the order id and amount,
Midtrans answers with a token and a redirect_url the browser is sent to.
The result of the payment arrives later through the notification webhook.

Docs: https://docs.midtrans.com/reference/backend-integration

Sandbox vs production is chosen by MIDTRANS_IS_PRODUCTION.
"""
import hashlib
import hmac
import logging
from typing import Optional

import requests

from app.core.config import get_settings, Settings
from app.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class MidtransClient:
    """
    Thin wrapper over the Snap transactions API.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.server_key = self.settings.midtrans_server_key
        self.base_url = self.settings.midtrans_base_url
        self.timeout = self.settings.midtrans_timeout_seconds
        self.http = session or requests.Session()

    def create_transaction(
        self,
        order_id: str,
        gross_amount: int,
        customer_details: Optional[dict] = None,
        expiry_hours: Optional[int] = None,
    ) -> dict:
        """
        Create a Snap transaction.

        Returns the gateway response ({"token": ..., "redirect_url": ...}).
        Raises GatewayError on network errors, non-2xx answers or a
        response without a token.
        """
        url = f"{self.base_url}/snap/v1/transactions"
        payload = {
            "transaction_details": {
                "order_id": order_id,
                "gross_amount": gross_amount
            },
            "credit_card": {
                "secure": True
            },
            "customer_details": customer_details or {},
        }
        if expiry_hours:
            payload["expiry"] = {"unit": "hour", "duration": expiry_hours}

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

        try:
            # Server key is the basic-auth username, password is empty
            response = self.http.post(
                url, json=payload, headers=headers,
                auth=(self.server_key, ""), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error("Midtrans request failed for %s: %s", order_id, e)
            raise GatewayError(detail=str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code not in (200, 201) or not data.get("token"):
            error_messages = data.get("error_messages") or [response.text[:200]]
            logger.error(
                "Midtrans rejected %s (HTTP %s): %s",
                order_id, response.status_code, "; ".join(map(str, error_messages))
            )
            raise GatewayError(detail="; ".join(map(str, error_messages)))

        return data


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 hex of order_id + status_code + gross_amount + server_key."""
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


def verify_signature(payload: dict, signature: Optional[str], server_key: str) -> bool:
    """Check a notification's signature_key against the payload."""
    if not signature:
        return False
    expected = compute_signature(
        str(payload.get("order_id", "")),
        str(payload.get("status_code", "")),
        str(payload.get("gross_amount", "")),
        server_key,
    )
    return hmac.compare_digest(expected, signature)


# Singleton instance
_midtrans_client: MidtransClient = None


def get_midtrans_client() -> MidtransClient:
    """Get or create Midtrans client (singleton pattern)"""
    global _midtrans_client
    if _midtrans_client is None:
        _midtrans_client = MidtransClient()
    return _midtrans_client
