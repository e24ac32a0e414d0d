from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.routers import audit_logs, billing, cash_register

OPENAPI_TAGS = [
    {"name": "Billing", "description": "Monthly charge generation, settlement and debt queries."},
    {"name": "Cash Register", "description": "Daily cash registers fed by settlements."},
    {"name": "Audit Logs", "description": "Query the audit trail for charges and members."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Monthly billing engine for gyms. "
        "Generates membership charges once per period, settles payments "
        "and keeps member debt in step."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Idempotency-Replayed"],
)


app.include_router(billing.router, prefix="/v1/billing", tags=["Billing"])
app.include_router(
    cash_register.router,
    prefix="/v1/cash_register",
    tags=["Cash Register"],
)
app.include_router(
    audit_logs.router,
    prefix="/v1/audit_logs",
    tags=["Audit Logs"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
