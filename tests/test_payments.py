import re
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import stripe

from config import ConfigurationError, Settings
from payments import PaymentProcessorError, StripeGateway


@pytest.fixture
def gateway():
    return StripeGateway(api_key="sk_test_123")


@pytest.mark.asyncio
async def test_issue_coupon_creates_single_use_full_discount(monkeypatch, gateway):
    coupon_create = AsyncMock(return_value=SimpleNamespace(id="co_1"))
    promo_create = AsyncMock(
        side_effect=lambda **kw: SimpleNamespace(id="promo_1", code=kw["code"])
    )
    monkeypatch.setattr(stripe.Coupon, "create_async", coupon_create)
    monkeypatch.setattr(stripe.PromotionCode, "create_async", promo_create)

    promo = await gateway.issue_coupon()

    coupon_create.assert_awaited_once_with(
        api_key="sk_test_123", duration="once", percent_off=100, max_redemptions=1
    )
    kwargs = promo_create.await_args.kwargs
    assert kwargs["coupon"] == "co_1"
    assert re.fullmatch(r"SHEPHERD[0-9A-F]{6}", kwargs["code"])
    assert promo.code == kwargs["code"]
    assert promo.coupon_id == "co_1"


@pytest.mark.asyncio
async def test_issue_coupon_wraps_stripe_errors(monkeypatch, gateway):
    monkeypatch.setattr(stripe.Coupon, "create_async", AsyncMock(return_value=SimpleNamespace(id="co_1")))
    monkeypatch.setattr(
        stripe.PromotionCode, "create_async",
        AsyncMock(side_effect=stripe.APIConnectionError("network down")),
    )

    with pytest.raises(PaymentProcessorError):
        await gateway.issue_coupon()


@pytest.mark.asyncio
async def test_checkout_session_parameters(monkeypatch, gateway):
    price_create = AsyncMock(return_value=SimpleNamespace(id="price_1"))
    session_create = AsyncMock(
        return_value=SimpleNamespace(id="cs_1", url="https://checkout.stripe.com/c/pay/cs_1")
    )
    monkeypatch.setattr(stripe.Price, "create_async", price_create)
    monkeypatch.setattr(stripe.checkout.Session, "create_async", session_create)

    price_id = await gateway.create_price(24000)
    session = await gateway.create_checkout_session(price_id, "https://h/success?x=1", "https://h/")

    price_create.assert_awaited_once_with(
        api_key="sk_test_123",
        currency="usd",
        unit_amount=24000,
        product_data={"name": "Gift Shepherd Yearly"},
    )
    kwargs = session_create.await_args.kwargs
    assert kwargs["line_items"] == [{"price": "price_1", "quantity": 1}]
    assert kwargs["mode"] == "payment"
    assert kwargs["allow_promotion_codes"] is True
    assert kwargs["payment_method_types"] == ["card"]
    assert kwargs["success_url"] == "https://h/success?x=1"
    assert kwargs["cancel_url"] == "https://h/"
    assert session.url == "https://checkout.stripe.com/c/pay/cs_1"


@pytest.mark.asyncio
async def test_create_price_wraps_stripe_errors(monkeypatch, gateway):
    monkeypatch.setattr(
        stripe.Price, "create_async",
        AsyncMock(side_effect=stripe.APIConnectionError("network down")),
    )
    with pytest.raises(PaymentProcessorError):
        await gateway.create_price(15000)


def test_from_settings_requires_secret_key():
    with pytest.raises(ConfigurationError):
        StripeGateway.from_settings(Settings())
    assert StripeGateway.from_settings(Settings(stripe_secret_key="sk_1")).api_key == "sk_1"
