"""Shared fakes and fixtures for the gift checkout tests."""

import pytest
from fastapi.testclient import TestClient

import main
from config import Settings
from logic import generate_promo_code
from models import CheckoutSession, PromotionCode
from payments import PaymentProcessorError


class FakeGateway:
    """Stands in for StripeGateway and records every call in `events`."""

    def __init__(self, events, fail_coupon_on=(), fail_checkout=False):
        self.events = events
        self.fail_coupon_on = set(fail_coupon_on)
        self.fail_checkout = fail_checkout
        self.amounts = []
        self.sessions = []
        self.codes = []
        self._coupon_calls = 0

    async def create_price(self, amount):
        self.events.append(("price", amount))
        self.amounts.append(amount)
        if self.fail_checkout:
            raise PaymentProcessorError("card_declined")
        return "price_123"

    async def create_checkout_session(self, price_id, success_url, cancel_url):
        self.events.append(("session", price_id))
        self.sessions.append({"price_id": price_id, "success_url": success_url, "cancel_url": cancel_url})
        return CheckoutSession(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")

    async def issue_coupon(self):
        self._coupon_calls += 1
        self.events.append(("coupon", self._coupon_calls))
        if self._coupon_calls in self.fail_coupon_on:
            raise PaymentProcessorError("rate limited")
        code = generate_promo_code()
        self.codes.append(code)
        return PromotionCode(id=f"promo_{self._coupon_calls}", code=code, coupon_id=f"co_{self._coupon_calls}")

    @property
    def coupon_calls(self):
        return self._coupon_calls


class FakeMailer:
    """Stands in for ResendMailer; `fail_for` addresses return False."""

    def __init__(self, events, fail_for=()):
        self.events = events
        self.fail_for = set(fail_for)
        self.sent = []

    async def send_email(self, to_email, subject, content):
        self.events.append(("email", to_email))
        self.sent.append({"to": to_email, "subject": subject, "html": content})
        return to_email not in self.fail_for


@pytest.fixture
def events():
    return []


@pytest.fixture
def gateway(events):
    return FakeGateway(events)


@pytest.fixture
def mailer(events):
    return FakeMailer(events)


@pytest.fixture
def settings():
    return Settings(
        stripe_secret_key="sk_test_123",
        resend_api_key="re_test_123",
        redirect_base_url="https://shepherd.study",
    )


@pytest.fixture
def app(settings, gateway, mailer):
    application = main.create_app(settings)
    application.dependency_overrides[main.get_payment_gateway] = lambda: gateway
    application.dependency_overrides[main.get_mailer] = lambda: mailer
    return application


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)
