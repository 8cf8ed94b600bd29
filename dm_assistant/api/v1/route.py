import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from dm_assistant.model.assistant.assistant_response import AssistantResponse
from dm_assistant.model.coach.coach_request import CreateCoachRequest
from dm_assistant.model.coach.coach_response import CreateCoachResponse
from dm_assistant.model.ingest.ingest_request import IngestRequest
from dm_assistant.model.ingest.ingest_response import IngestErrorResponse, IngestResponse
from dm_assistant.model.sales.sale_request import SaleRequest
from dm_assistant.model.sales.sale_response import SaleResponse
from dm_assistant.service.assistant.assistant import ai_service
from dm_assistant.service.coach.provision import ProvisionError, create_coach_service
from dm_assistant.service.ingest.ingest import ingest_service
from dm_assistant.service.tracking.tracking import ClickInfo, OfferNotFoundError, record_click, record_sale

logger = logging.getLogger(__name__)

api_router = APIRouter()


@api_router.post("/ai-assistant", response_model=AssistantResponse)
async def ai_assistant(request: Request):
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("webhook body is not valid JSON")
        payload = {}
    return await ai_service(payload)


@api_router.post("/process-content", response_model=IngestResponse)
async def process_content(req: IngestRequest):
    try:
        return await ingest_service(req)
    except Exception as exc:
        logger.exception("content processing failed file=%s coach_id=%s", req.filename, req.coach_id)
        body = IngestErrorResponse(error=str(exc) or "Unknown error")
        return JSONResponse(status_code=500, content=body.model_dump())


@api_router.post("/create-coach", response_model=CreateCoachResponse)
async def create_coach(req: CreateCoachRequest, authorization: Optional[str] = Header(default=None)):
    try:
        return await create_coach_service(authorization, req)
    except ProvisionError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    except Exception as exc:
        logger.exception("coach provisioning failed")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})


@api_router.get("/track/{slug}")
async def track(slug: str, request: Request):
    info = ClickInfo(
        user_agent=request.headers.get("user-agent", ""),
        forwarded_for=request.headers.get("x-forwarded-for"),
        real_ip=request.headers.get("x-real-ip"),
        peer_ip=request.client.host if request.client else None,
    )
    try:
        target_url = await asyncio.to_thread(record_click, slug, info)
    except OfferNotFoundError:
        return PlainTextResponse("Offer not found", status_code=404)
    except Exception:
        logger.exception("click tracking failed slug=%s", slug)
        return PlainTextResponse("Error processing request", status_code=500)
    return RedirectResponse(target_url, status_code=302)


@api_router.post("/sales-webhook", response_model=SaleResponse)
async def sales_webhook(req: SaleRequest):
    logger.info("sales webhook received offer=%s amount=%s", req.offer_slug, req.amount)
    try:
        return await asyncio.to_thread(record_sale, req)
    except OfferNotFoundError:
        logger.warning("sales webhook for unknown offer=%s", req.offer_slug)
        return JSONResponse(status_code=404, content={"error": "Offer not found"})
    except Exception as exc:
        logger.exception("sales webhook failed offer=%s", req.offer_slug)
        return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})
