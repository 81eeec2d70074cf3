import json
import secrets
from typing import Any, List, Mapping, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from models import Order, Recipient

PROMO_CODE_PREFIX = "SHEPHERD"

RECIPIENT_EMAIL_FIELD = "recipient_email"
RECIPIENT_NAME_FIELD = "recipient_name"
RECIPIENT_MESSAGE_FIELD = "recipientMessage"


class InvalidOrderError(ValueError):
    """Raised when an order cannot be built from request data."""


def calculate_price(num_coupons: int) -> int:
    # amounts in cents
    if num_coupons == 1:
        return 15000
    elif num_coupons == 2:
        return 24000
    return 10000 * num_coupons


def format_names(names: Any) -> Any:
    """
    "Alice" -> "Alice"
    ["Alice"] -> "Alice"
    ["Alice", "Bob", "Carl"] -> "Alice, Bob and Carl"
    """
    if not isinstance(names, (list, tuple)):
        return names
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]


def generate_promo_code() -> str:
    return f"{PROMO_CODE_PREFIX}{secrets.token_hex(3).upper()}"


def parse_recipients(form: Mapping[str, Any]) -> List[Recipient]:
    """
    Collect recipients from index-suffixed form fields, in the order the
    recipient_email fields were submitted. The suffix may be empty
    (recipient_email, recipient_email1, recipient_email2, ...).
    """
    recipients: List[Recipient] = []
    for key in form.keys():
        if not key.startswith(RECIPIENT_EMAIL_FIELD):
            continue
        index = key[len(RECIPIENT_EMAIL_FIELD):]
        message = form.get(f"{RECIPIENT_MESSAGE_FIELD}{index}")
        recipients.append(
            Recipient(
                recipient_email=form.get(key) or "",
                recipient_name=form.get(f"{RECIPIENT_NAME_FIELD}{index}") or "",
                recipientMessage=message or None,
            )
        )
    return recipients


def build_success_url(base_url: str, order: Order, order_id: Optional[str] = None) -> str:
    params = {
        "user_email": order.user_email,
        "senderName": order.senderName,
        "childNames": json.dumps(order.child_names),
        "recipientList": json.dumps(
            [r.model_dump(exclude_none=True) for r in order.recipients]
        ),
    }
    if order_id:
        params["order_id"] = order_id
    return f"{base_url}?{urlencode(params)}"


def parse_success_query(query: Mapping[str, Any]) -> Order:
    """Rebuild an Order from the success redirect's query parameters."""
    raw_recipients = query.get("recipientList")
    if raw_recipients is None:
        raise InvalidOrderError("recipientList is required")

    try:
        data = json.loads(raw_recipients)
    except json.JSONDecodeError as exc:
        raise InvalidOrderError("recipientList is not valid JSON") from exc
    if not isinstance(data, list):
        raise InvalidOrderError("recipientList must be a JSON array")

    child_names = query.get("childNames")
    if child_names is not None:
        # only validated; names are taken from the recipients themselves
        try:
            json.loads(child_names)
        except json.JSONDecodeError as exc:
            raise InvalidOrderError("childNames is not valid JSON") from exc

    try:
        return Order(
            user_email=query.get("user_email") or "",
            senderName=query.get("senderName") or "",
            recipients=[Recipient.model_validate(item) for item in data],
        )
    except ValidationError as exc:
        raise InvalidOrderError("recipientList is malformed") from exc
