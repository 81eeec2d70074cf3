import stripe

from config import Settings
from logger import get_logger
from logic import generate_promo_code
from models import CheckoutSession, PromotionCode

logger = get_logger(__name__)


class PaymentProcessorError(RuntimeError):
    """Raised when a Stripe call fails."""


class StripeGateway:
    def __init__(self, api_key: str, currency: str = "usd", product_name: str = "Gift Shepherd Yearly"):
        self.api_key = api_key
        self.currency = currency
        self.product_name = product_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        return cls(
            api_key=settings.require("stripe_secret_key"),
            currency=settings.currency,
            product_name=settings.product_name,
        )

    async def create_price(self, amount: int) -> str:
        try:
            price = await stripe.Price.create_async(
                api_key=self.api_key,
                currency=self.currency,
                unit_amount=amount,
                product_data={"name": self.product_name},
            )
        except stripe.StripeError as exc:
            raise PaymentProcessorError(f"Could not create price: {exc}") from exc
        logger.info("Created price %s for %d %s", price.id, amount, self.currency)
        return price.id

    async def create_checkout_session(self, price_id: str, success_url: str, cancel_url: str) -> CheckoutSession:
        try:
            session = await stripe.checkout.Session.create_async(
                api_key=self.api_key,
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                mode="payment",
                allow_promotion_codes=True,
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as exc:
            raise PaymentProcessorError(f"Could not create checkout session: {exc}") from exc
        logger.info("Created checkout session %s", session.id)
        return CheckoutSession(id=session.id, url=session.url)

    async def issue_coupon(self) -> PromotionCode:
        """
        Create a once-only, single-redemption 100%-off coupon and bind a
        fresh SHEPHERDXXXXXX promotion code to it.

        Not idempotent: if the promotion code call fails the coupon is left
        behind unused in Stripe.
        """
        try:
            coupon = await stripe.Coupon.create_async(
                api_key=self.api_key,
                duration="once",
                percent_off=100,
                max_redemptions=1,
            )
            promo = await stripe.PromotionCode.create_async(
                api_key=self.api_key,
                coupon=coupon.id,
                code=generate_promo_code(),
            )
        except stripe.StripeError as exc:
            raise PaymentProcessorError(f"Could not issue coupon: {exc}") from exc
        logger.info("Issued promotion code %s (coupon %s)", promo.id, coupon.id)
        return PromotionCode(id=promo.id, code=promo.code, coupon_id=coupon.id)
