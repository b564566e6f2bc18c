"""FastAPI routes for payment links, status sync and gateway webhooks."""

from fastapi import APIRouter, Depends, Request
from protean.utils.globals import current_domain

from storefront import config
from storefront.api.deps import current_actor
from storefront.api.envelope import Envelope, ok
from storefront.payments import queries
from storefront.payments.api.schemas import CancelPaymentRequest, ConfigureGatewayRequest, CreatePaymentLinkRequest
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.payment.link import CreatePaymentLink
from storefront.payments.payment.processing import CancelPayment, ProcessPayment
from storefront.payments.payment.webhook import ProcessPaymentWebhook
from storefront.shared.access import Actor
from storefront.shared.errors import BusinessRuleViolation, Forbidden, Unauthorized
from storefront.utils.logging import logger

payment_router = APIRouter(prefix="/payments", tags=["payments"])
order_payment_router = APIRouter(prefix="/orders", tags=["payments"])

PAYMENT_METHODS = [
    {"code": "cod", "name": "Cash on delivery", "description": "Pay the courier when the order arrives"},
    {"code": "vietqr", "name": "VietQR", "description": "Bank transfer by scanning a VietQR code"},
]


@order_payment_router.post("/{order_id}/payment/link", status_code=201, response_model=Envelope)
async def create_payment_link(
    order_id: str,
    body: CreatePaymentLinkRequest,
    actor: Actor = Depends(current_actor),
) -> Envelope:
    command = CreatePaymentLink(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        order_id=order_id,
        payment_method=body.payment_method,
    )
    payment_id = current_domain.process(command, asynchronous=False)
    return ok(queries.load_payment(payment_id), "Payment link created")


@order_payment_router.get("/{order_id}/payment", response_model=Envelope)
async def get_order_payment(order_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.get_payment_for_order(order_id, actor))


@payment_router.get("/methods", response_model=Envelope)
async def list_payment_methods() -> Envelope:
    return ok(PAYMENT_METHODS)


@payment_router.get("/process/{order_code}", response_model=Envelope)
async def process_payment(order_code: int, actor: Actor = Depends(current_actor)) -> Envelope:
    command = ProcessPayment(actor_id=actor.user_id, actor_role=actor.role.value, order_code=order_code)
    status = current_domain.process(command, asynchronous=False)
    return ok({"order_code": order_code, "status": status}, "Payment status updated")


@payment_router.post("/cancel/{order_code}", response_model=Envelope)
async def cancel_payment(
    order_code: int,
    body: CancelPaymentRequest,
    actor: Actor = Depends(current_actor),
) -> Envelope:
    command = CancelPayment(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        order_code=order_code,
        reason=body.reason,
    )
    status = current_domain.process(command, asynchronous=False)
    return ok({"order_code": order_code, "status": status}, "Payment cancelled")


@payment_router.post("/webhook/payos", response_model=Envelope)
async def payos_webhook(request: Request) -> Envelope:
    """Verify the signature over the raw body, then record the reported outcome."""
    payload = await request.body()
    signature = request.headers.get("X-PayOS-Signature") or request.headers.get("X-Signature") or ""

    gateway = get_gateway("vietqr")
    if not gateway.verify_webhook_signature(payload, signature):
        logger.warning("Webhook rejected: invalid signature", client=request.client.host if request.client else None)
        raise Unauthorized("Invalid webhook signature", field="signature")

    info = gateway.parse_webhook(payload)
    command = ProcessPaymentWebhook(
        order_code=info.order_code,
        status=info.status,
        amount=info.amount,
        transaction_id=info.transaction_id,
        reference=info.reference,
        description=info.description,
    )
    status = current_domain.process(command, asynchronous=False)
    return ok({"order_code": info.order_code, "status": status}, "Webhook processed")


@payment_router.post("/gateway/configure", response_model=Envelope)
async def configure_gateway(body: ConfigureGatewayRequest) -> Envelope:
    """Configure the FakeGateway behaviour (non-production only)."""
    if config.is_production():
        raise Forbidden("Gateway configuration not available in production", field="environment")

    gateway = get_gateway("vietqr")
    if not isinstance(gateway, FakeGateway):
        raise BusinessRuleViolation("Gateway configuration only available for FakeGateway", field="gateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        payment_status=body.payment_status,
    )
    return ok(
        {
            "gateway": gateway.name,
            "should_succeed": gateway.should_succeed,
            "failure_reason": gateway.failure_reason,
            "payment_status": gateway.payment_status,
        }
    )
