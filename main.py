from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from mangum import Mangum

from config import ConfigurationError, Settings
from logger import get_logger, set_level
from logic import InvalidOrderError
from mailer import ResendMailer
from orders import handle_success, order_from_form, start_checkout
from payments import PaymentProcessorError, StripeGateway
from storage import OrderStore

logger = get_logger(__name__)

API_PREFIX = "/.netlify/functions/api"
CHECKOUT_ERROR_MESSAGE = "An error occurred while creating the checkout session."


# ---------------------------
# Dependencies
# ---------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_order_store(request: Request) -> OrderStore:
    return request.app.state.order_store


def get_payment_gateway(request: Request) -> StripeGateway:
    state = request.app.state
    if state.payment_gateway is None:
        state.payment_gateway = StripeGateway.from_settings(state.settings)
    return state.payment_gateway


def get_mailer(request: Request) -> ResendMailer:
    state = request.app.state
    if state.mailer is None:
        state.mailer = ResendMailer.from_settings(state.settings)
    return state.mailer


# ---------------------------
# Routes
# ---------------------------

router = APIRouter(prefix=API_PREFIX)


@router.get("", response_class=PlainTextResponse)
@router.get("/", response_class=PlainTextResponse)
def health_check():
    return "App is running.."


@router.post("")
@router.post("/")
async def create_checkout(
    request: Request,
    store: OrderStore = Depends(get_order_store),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    form = await request.form()
    try:
        order = order_from_form(form)
    except InvalidOrderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        session = await start_checkout(
            order,
            gateway,
            store,
            success_base_url=str(request.url_for("checkout_success")),
            cancel_url=str(request.base_url),
        )
    except PaymentProcessorError:
        logger.exception("Checkout session creation failed")
        return PlainTextResponse(CHECKOUT_ERROR_MESSAGE, status_code=500)

    return RedirectResponse(session.url, status_code=302)


@router.get("/success", name="checkout_success")
async def checkout_success(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: OrderStore = Depends(get_order_store),
    gateway: StripeGateway = Depends(get_payment_gateway),
    mailer: ResendMailer = Depends(get_mailer),
):
    try:
        await handle_success(request.query_params, gateway, mailer, store, settings)
    except InvalidOrderError as exc:
        logger.warning("Rejected success callback: %s (%s)", exc, exc.__cause__)
        raise HTTPException(status_code=400, detail=str(exc))

    return RedirectResponse(settings.final_redirect_url, status_code=302)


# ---------------------------
# FastAPI App
# ---------------------------

async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return PlainTextResponse("Service is not configured.", status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    set_level(settings.log_level)

    app = FastAPI(title="Gift Subscription Checkout")
    app.state.settings = settings
    app.state.order_store = OrderStore(ttl_seconds=settings.order_ttl_seconds)
    app.state.payment_gateway = None
    app.state.mailer = None

    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.include_router(router)
    return app


app = create_app()

# Netlify / AWS Lambda entry point
handler = Mangum(app, lifespan="off")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=False,
    )
