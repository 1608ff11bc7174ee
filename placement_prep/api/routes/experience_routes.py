"""
Placement Experience Routes

GET /experiences - List experiences, newest first (optional ?company= filter)
POST /experiences - Share an experience (alumni only)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from placement_prep.core.auth import get_current_alumni
from placement_prep.models.records import PlacementExperienceRecord
from placement_prep.schemas.schemas import ExperienceCreate, ExperienceResponse
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway

router = APIRouter(prefix="/experiences", tags=["Experiences"])


@router.get("", response_model=List[PlacementExperienceRecord])
async def list_experiences(
    company: Optional[str] = Query(None, description="Case-insensitive company name fragment"),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Browse or search placement experiences. Open to everyone."""
    if company:
        return gateway.experiences.search_by_company(company)
    return gateway.experiences.list_all()


@router.post("", response_model=ExperienceResponse, status_code=201)
async def share_experience(
    data: ExperienceCreate,
    alumni: dict = Depends(get_current_alumni),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Share a placement experience. The author's current name is stored with it."""
    experience = gateway.experiences.insert(
        alumni_id=alumni["user_id"],
        alumni_name=alumni["name"],
        data=data.model_dump(by_alias=True)
    )
    return ExperienceResponse(message="Experience shared successfully", experience=experience)
