"""Storefront FastAPI application.

Web server that processes commands synchronously via HTTP. Every request runs
inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers, sync event processing
#   - "production" → event_processing = "async" (handlers fire via Engine)
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront import config
from storefront.api.errors import register_exception_handlers
from storefront.domain import storefront

storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce backend: catalogue, inventory, carts, orders, promotions, payments and shipping",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Protean domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.addresses.api import address_router  # noqa: E402
from storefront.audit.api import audit_router  # noqa: E402
from storefront.banners.api import banner_router  # noqa: E402
from storefront.cart.api import cart_router  # noqa: E402
from storefront.catalogue.api import category_router, product_router  # noqa: E402
from storefront.inventory.api import inventory_router  # noqa: E402
from storefront.notifications.api import notification_router  # noqa: E402
from storefront.ordering.api import admin_order_router, order_router  # noqa: E402
from storefront.payments.api import order_payment_router, payment_router  # noqa: E402
from storefront.permissions.api import permission_router, role_router, user_permission_router  # noqa: E402
from storefront.promotions.api import coupon_router, point_router  # noqa: E402
from storefront.ratelimit.api import rate_limit_router  # noqa: E402
from storefront.ratelimit.dependency import enforce_rate_limits  # noqa: E402
from storefront.search.api import search_router  # noqa: E402
from storefront.shipping.api import shipping_router, tracking_router  # noqa: E402
from storefront.uploads.api import upload_router  # noqa: E402
from storefront.wishlists.api import wishlist_router  # noqa: E402

api = APIRouter(prefix="/api/v1", dependencies=[Depends(enforce_rate_limits)])

for router in (
    product_router,
    category_router,
    search_router,
    inventory_router,
    cart_router,
    order_router,
    admin_order_router,
    coupon_router,
    point_router,
    order_payment_router,
    payment_router,
    notification_router,
    address_router,
    wishlist_router,
    audit_router,
    rate_limit_router,
    banner_router,
    upload_router,
    shipping_router,
    tracking_router,
    permission_router,
    role_router,
    user_permission_router,
):
    api.include_router(router)

app.include_router(api)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
            "environment": config.environment(),
        }
    )
