"""
Lead endpoints: generation, enrichment + persistence, listing and export.

Endpoints:
- POST /api/leads/generate   candidate tenants for the lead form
- POST /api/leads            enrich the top leads and save all of them
- GET  /api/leads            saved leads
- GET  /api/leads/export.csv saved leads as a CSV download
- GET  /api/leads/copy       saved leads as a plain-text listing
- GET  /api/leads/{lead_id}  one saved lead
"""

import json

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import TypeAdapter, ValidationError

from reva.core.deps import LeadServiceDep, PlacesClientDep
from reva.core.exceptions import ErrorCode
from reva.models.domain.lead import GeneratedLeads, LeadCreate, LeadForm, LeadResponse
from reva.services.lead_export import CSV_FILENAME, leads_to_csv, leads_to_text
from reva.services.lead_generator import generate_leads

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])

_lead_list = TypeAdapter(list[LeadCreate])


@router.post("/generate", response_model=GeneratedLeads)
async def generate(form: LeadForm, places: PlacesClientDep):
    """
    Generate candidate tenants for the submitted property requirements.

    Live Google Places results when GOOGLE_PLACES_API_KEY is set,
    sample businesses otherwise (source tells which).
    """
    return await generate_leads(form, places)


@router.post("", response_model=list[LeadResponse])
async def save_leads(request: Request, service: LeadServiceDep):
    """
    Enrich the top leads with PDL contact data, then save every lead.

    Body: JSON array of leads. Anything that is not a valid array of
    leads is rejected with 400 rather than 422.
    """
    try:
        leads = _lead_list.validate_python(await request.json())
    except (ValidationError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("invalid_lead_payload", error=str(e)[:500])
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": ErrorCode.INVALID_LEAD_DATA.value, "message": "Invalid lead data"}
        )

    return await service.save_leads(leads)


@router.get("", response_model=list[LeadResponse])
async def list_leads(service: LeadServiceDep):
    return service.get_leads()


@router.get("/export.csv")
async def export_csv(service: LeadServiceDep) -> Response:
    return Response(
        content=leads_to_csv(service.get_lead_entities()),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'}
    )


@router.get("/copy", response_class=PlainTextResponse)
async def copy_all(service: LeadServiceDep) -> str:
    return leads_to_text(service.get_lead_entities())


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(lead_id: int, service: LeadServiceDep):
    return service.get_lead(lead_id)
