"""
FastAPI Web Application - TSL Backend JSON API
===============================================

Endpoints for pilot leads, businesses, customer imports, review-request
campaigns and per-business summaries.

Every handler answers with {"ok": true, ...} or {"error": message}.
Unexpected failures are logged here and returned as a generic 500.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..application import BusinessNotFoundError, CampaignRunner, summarize
from ..domain.models import EntityKind
from ..infrastructure.config import Settings, get_settings
from ..infrastructure.importer import SUPPORTED_EXTENSIONS, ExcelParser
from ..infrastructure.persistence import Store, open_store
from ..infrastructure.whatsapp import CloudAPIProvider, MessagingProvider
from .schemas import BusinessIn, CustomerImportIn, PilotLeadIn, to_api

settings = get_settings()

logging.basicConfig(
    level=settings.server.log_level,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


class StoreNotReadyError(Exception):
    """Raised when a request arrives before the store has been selected."""
    pass


# ── Lifespan ───────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    for issue in settings.validate():
        logger.warning(issue)

    # Store selection finishes before the first request is served
    app.state.store = open_store(settings.database.url)
    app.state.messaging = CloudAPIProvider.from_settings(settings.whatsapp)
    logger.info(f"Store ready ({app.state.store.mode})")
    yield


app = FastAPI(title="TSL Backend", description="WhatsApp Review Request Campaigns", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.server.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Dependencies ───────────────────────────────────────────────────

def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreNotReadyError()
    return store


def get_messaging(request: Request) -> MessagingProvider:
    provider = getattr(request.app.state, "messaging", None)
    if provider is None:
        provider = CloudAPIProvider.from_settings(settings.whatsapp)
        request.app.state.messaging = provider
    return provider


def get_app_settings() -> Settings:
    return settings


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ── Exception handlers ─────────────────────────────────────────────

@app.exception_handler(StoreNotReadyError)
async def store_not_ready_handler(request: Request, exc: StoreNotReadyError):
    logger.warning(f"{request.method} {request.url.path} rejected: store not ready")
    return _error(503, "Store not ready")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return _error(400, "Invalid request: " + "; ".join(problems))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


# ── Health ─────────────────────────────────────────────────────────

@app.get("/api/health")
async def health(request: Request):
    store = getattr(request.app.state, "store", None)
    return {
        "ok": True,
        "message": "TSL backend running",
        "storage": store.mode if store else "starting",
    }


# ── Pilot leads ────────────────────────────────────────────────────

@app.post("/api/pilot")
async def create_pilot_lead(
    body: PilotLeadIn,
    store: Store = Depends(get_store),
    provider: MessagingProvider = Depends(get_messaging),
    app_settings: Settings = Depends(get_app_settings),
):
    if not body.name or not body.business_name or not body.phone:
        return _error(400, "name, businessName & phone required")

    try:
        lead = store.create(EntityKind.PILOT_LEAD, body.model_dump(exclude_none=True))

        # Confirmation to the lead, template must exist in the WhatsApp account
        await asyncio.to_thread(
            provider.send_template,
            to=lead.phone,
            template_name=app_settings.whatsapp.template_name,
            parameters=[lead.name or "there", lead.business_name],
        )

        logger.info(f"Pilot lead {lead.id} created for {lead.business_name}")
        return {"ok": True, "leadId": lead.id}
    except Exception as e:
        logger.exception(f"POST /api/pilot error: {e}")
        return _error(500, INTERNAL_ERROR)


# ── Businesses ─────────────────────────────────────────────────────

@app.post("/api/businesses")
async def create_business(body: BusinessIn, store: Store = Depends(get_store)):
    if not body.name:
        return _error(400, "Business name required")

    try:
        business = store.create(EntityKind.BUSINESS, body.model_dump(exclude_none=True))
        logger.info(f"Business {business.id} created: {business.name}")
        return {"ok": True, "business": to_api(business)}
    except Exception as e:
        logger.exception(f"POST /api/businesses error: {e}")
        return _error(500, INTERNAL_ERROR)


@app.get("/api/businesses/{business_id}/summary")
async def business_summary(business_id: str, store: Store = Depends(get_store)):
    try:
        return {"ok": True, **summarize(store, business_id)}
    except Exception as e:
        logger.exception(f"GET /api/businesses/{business_id}/summary error: {e}")
        return _error(500, INTERNAL_ERROR)


# ── Customer import ────────────────────────────────────────────────

@app.post("/api/customers/import")
async def import_customers(body: CustomerImportIn, store: Store = Depends(get_store)):
    if not body.business_id or not body.customers:
        return _error(400, "businessId and customers[] required")

    missing = [i for i, c in enumerate(body.customers) if not c.phone]
    if missing:
        return _error(400, f"phone required for customers at index {', '.join(map(str, missing))}")

    docs = [
        {
            "business_id": body.business_id,
            "name": c.name or "",
            "phone": c.phone,
            "last_visit_date": c.last_visit_date,
        }
        for c in body.customers
    ]

    try:
        inserted = store.create_many(EntityKind.CUSTOMER, docs)
        logger.info(f"Imported {len(inserted)} customers for business {body.business_id}")
        return {"ok": True, "inserted": len(inserted)}
    except Exception as e:
        logger.exception(f"POST /api/customers/import error: {e}")
        return _error(500, INTERNAL_ERROR)


@app.post("/api/customers/import/file")
async def import_customers_file(
    business_id: Optional[str] = Form(None, alias="businessId"),
    file: Optional[UploadFile] = File(None),
    store: Store = Depends(get_store),
):
    """Import customers from Excel/CSV, fully in memory."""
    if not business_id or file is None or not file.filename:
        return _error(400, "businessId and file required")

    ext = Path(file.filename).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        return _error(400, "Invalid file type. Use .xlsx, .xls, or .csv")

    try:
        content = await file.read()
        parser = ExcelParser()
        try:
            rows, columns = parser.parse_bytes(content, file.filename)
        except ValueError as e:
            return _error(400, str(e))

        if not rows:
            return _error(400, "No valid customers found in file")

        docs = [{"business_id": business_id, **row} for row in rows]
        inserted = store.create_many(EntityKind.CUSTOMER, docs)
        logger.info(f"Imported {len(inserted)} customers for business {business_id} from {file.filename}")
        return {"ok": True, "inserted": len(inserted), "columns": columns}
    except Exception as e:
        logger.exception(f"POST /api/customers/import/file error: {e}")
        return _error(500, INTERNAL_ERROR)


# ── Campaigns ──────────────────────────────────────────────────────

@app.post("/api/campaigns/{business_id}/send-review-requests")
async def send_review_requests(
    business_id: str,
    store: Store = Depends(get_store),
    provider: MessagingProvider = Depends(get_messaging),
    app_settings: Settings = Depends(get_app_settings),
):
    runner = CampaignRunner(store, provider, app_settings.campaign, app_settings.whatsapp)
    try:
        # Sends block on the network; keep the event loop serving other requests
        result = await asyncio.to_thread(runner.run, business_id)
        return {"ok": True, "requested": result.requested, "message": result.message}
    except BusinessNotFoundError:
        return _error(404, "Business not found")
    except Exception as e:
        logger.exception(f"POST /api/campaigns/{business_id}/send-review-requests error: {e}")
        return _error(500, INTERNAL_ERROR)
