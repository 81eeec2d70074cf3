from typing import Any, Mapping, Optional, Tuple

from config import Settings
from logger import get_logger
from logic import (
    InvalidOrderError,
    build_success_url,
    calculate_price,
    parse_recipients,
    parse_success_query,
)
from mailer import ResendMailer
from models import CheckoutSession, FulfillmentReport, Order, RecipientResult
from payments import PaymentProcessorError, StripeGateway
from storage import ClaimStatus, OrderStore
from templates import purchaser_template, recipient_template

logger = get_logger(__name__)

PURCHASER_SUBJECT = "Coupon Purchase Confirmation"
RECIPIENT_SUBJECT = "Welcome to Shepherd"


def order_from_form(form: Mapping[str, Any]) -> Order:
    recipients = parse_recipients(form)
    if not recipients:
        raise InvalidOrderError("At least one recipient is required.")
    return Order(
        user_email=form.get("user_email") or "",
        senderName=form.get("senderName") or "",
        recipients=recipients,
    )


async def start_checkout(
    order: Order,
    gateway: StripeGateway,
    store: OrderStore,
    success_base_url: str,
    cancel_url: str,
) -> CheckoutSession:
    amount = calculate_price(len(order.recipients))
    logger.info(
        "Starting checkout for %d recipient(s), amount %d", len(order.recipients), amount
    )

    price_id = await gateway.create_price(amount)
    order_id = store.put(order)
    session = await gateway.create_checkout_session(
        price_id=price_id,
        success_url=build_success_url(success_base_url, order, order_id),
        cancel_url=cancel_url,
    )
    return session


def resolve_order(query: Mapping[str, Any], store: OrderStore) -> Tuple[Order, Optional[str], bool]:
    """
    Returns (order, order_id, replayed). A stored order wins over the query
    parameters; the query is only decoded when the id is missing or unknown.
    """
    order_id: Optional[str] = query.get("order_id") or None
    status, order = store.claim(order_id)
    if status is ClaimStatus.CLAIMED:
        return order, order_id, False
    if status is ClaimStatus.ALREADY_FULFILLED:
        return order, order_id, True
    if order_id:
        logger.warning("Order %s not found in store, falling back to URL data", order_id)
    return parse_success_query(query), order_id, False


async def fulfill_order(
    order: Order,
    gateway: StripeGateway,
    mailer: ResendMailer,
    settings: Settings,
    order_id: Optional[str] = None,
) -> FulfillmentReport:
    report = FulfillmentReport(order_id=order_id, purchaser_email=order.user_email)

    report.purchaser_notified = await mailer.send_email(
        order.user_email,
        PURCHASER_SUBJECT,
        purchaser_template(order.senderName, order.child_names, settings.referral_url),
    )

    # one recipient at a time, in submission order
    for recipient in order.recipients:
        result = RecipientResult(
            recipient_email=recipient.recipient_email,
            recipient_name=recipient.recipient_name,
        )
        report.results.append(result)

        try:
            promo = await gateway.issue_coupon()
        except PaymentProcessorError as exc:
            logger.error("Coupon issuance failed for %s: %s", recipient.recipient_email, exc)
            result.error = str(exc)
            continue

        result.coupon_code = promo.code
        result.email_sent = await mailer.send_email(
            recipient.recipient_email,
            RECIPIENT_SUBJECT,
            recipient_template(
                recipient.recipient_name,
                order.senderName,
                promo.code,
                recipient.recipientMessage,
            ),
        )
        if not result.email_sent:
            result.error = "email delivery failed"

    log_report(report)
    return report


async def handle_success(
    query: Mapping[str, Any],
    gateway: StripeGateway,
    mailer: ResendMailer,
    store: OrderStore,
    settings: Settings,
) -> FulfillmentReport:
    order, order_id, replayed = resolve_order(query, store)
    if replayed:
        logger.info("Order %s was already fulfilled, skipping side effects", order_id)
        return FulfillmentReport(
            order_id=order_id,
            purchaser_email=order.user_email,
            replayed=True,
        )
    return await fulfill_order(order, gateway, mailer, settings, order_id=order_id)


def log_report(report: FulfillmentReport) -> None:
    if report.all_succeeded:
        logger.info(
            "Fulfilled order %s: %d coupon(s) issued and delivered",
            report.order_id, report.coupons_issued,
        )
        return
    logger.warning(
        "Order %s fulfilled with problems: purchaser_notified=%s, failed recipients=%s",
        report.order_id,
        report.purchaser_notified,
        [(r.recipient_email, r.error) for r in report.failures],
    )
