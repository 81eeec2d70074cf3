from typing import List, Optional
from pydantic import BaseModel, Field


class Recipient(BaseModel):
    # Field names match the form fields and the serialized recipientList
    recipient_email: str
    recipient_name: str = ""
    recipientMessage: Optional[str] = None


class Order(BaseModel):
    user_email: str
    senderName: str
    recipients: List[Recipient] = Field(default_factory=list)

    @property
    def child_names(self) -> List[str]:
        return [r.recipient_name for r in self.recipients]


class CheckoutSession(BaseModel):
    id: str
    url: str


class PromotionCode(BaseModel):
    id: str
    code: str
    coupon_id: str


class RecipientResult(BaseModel):
    recipient_email: str
    recipient_name: str = ""
    coupon_code: Optional[str] = None
    email_sent: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.coupon_code is not None and self.email_sent


class FulfillmentReport(BaseModel):
    order_id: Optional[str] = None
    purchaser_email: str
    purchaser_notified: bool = False
    replayed: bool = False
    results: List[RecipientResult] = Field(default_factory=list)

    @property
    def coupons_issued(self) -> int:
        return sum(1 for r in self.results if r.coupon_code is not None)

    @property
    def failures(self) -> List[RecipientResult]:
        return [r for r in self.results if not r.ok]

    @property
    def all_succeeded(self) -> bool:
        return self.purchaser_notified and not self.failures
