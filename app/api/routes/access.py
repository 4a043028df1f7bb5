"""
Access gating and profile routes.

Redemption failures (invalid, expired, exhausted code) are AccessCodeError
subclasses and come back as 400 with a specific code.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.auth import get_api_key
from app.core.database import get_db
from app.core.errors import success
from app.models.models import model_to_dict
from app.services.core.access_service import AccessService

router = APIRouter(tags=["access"], dependencies=[Depends(get_api_key)])


class RedeemRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=36)
    code: str = Field(..., min_length=1, max_length=50)


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    preferred_sportsbook: Optional[str] = Field(None, max_length=100)


@router.post("/access/redeem")
async def redeem_access_code(request: RedeemRequest, db: Session = Depends(get_db)):
    return success(AccessService(db).redeem(request.user_id, request.code))


@router.get("/access/{user_id}")
async def get_access(user_id: str, db: Session = Depends(get_db)):
    return success({"userId": user_id, "hasAccess": AccessService(db).has_access(user_id)})


@router.put("/profiles/{user_id}")
async def update_profile(user_id: str, request: ProfileUpdate, db: Session = Depends(get_db)):
    profile = AccessService(db).upsert_profile(
        user_id,
        display_name=request.display_name,
        preferred_sportsbook=request.preferred_sportsbook,
    )
    return success(model_to_dict(profile))
