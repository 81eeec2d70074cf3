import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised when a required environment variable is missing."""


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: Optional[str] = None
    resend_api_key: Optional[str] = None
    redirect_base_url: Optional[str] = None     # final destination after fulfillment
    referral_url: Optional[str] = None          # shown in the purchaser email when set

    email_from: str = "hello@shepherd.study"
    resend_api_url: str = "https://api.resend.com/emails"
    email_timeout_seconds: float = 10.0

    currency: str = "usd"
    product_name: str = "Gift Shepherd Yearly"

    order_ttl_seconds: int = 86400
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        def _get(name: str) -> Optional[str]:
            value = env.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        return cls(
            stripe_secret_key=_get("STRIPE_SECRET_KEY"),
            resend_api_key=_get("RESEND_API_KEY"),
            redirect_base_url=_get("REDIRECT_BASE_URL"),
            referral_url=_get("REFERRAL_URL"),
            email_from=_get("EMAIL_FROM") or cls.email_from,
            resend_api_url=_get("RESEND_API_URL") or cls.resend_api_url,
            email_timeout_seconds=float(_get("EMAIL_TIMEOUT_SECONDS") or cls.email_timeout_seconds),
            order_ttl_seconds=int(_get("ORDER_TTL_SECONDS") or cls.order_ttl_seconds),
            log_level=(_get("LOG_LEVEL") or cls.log_level).upper(),
        )

    def require(self, field_name: str) -> str:
        value = getattr(self, field_name)
        if not value:
            raise ConfigurationError(
                f"{field_name.upper()} is not configured. Export it before starting the server."
            )
        return value

    @property
    def final_redirect_url(self) -> str:
        if not self.redirect_base_url:
            return "/"
        return f"{self.redirect_base_url.rstrip('/')}/success"
