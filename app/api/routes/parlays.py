"""
Parlay API Routes.

Provides endpoints for saving, listing and deleting a user's parlays.
"""
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.auth import get_api_key
from app.core.database import get_db
from app.core.errors import success
from app.services.core.parlay_service import ParlayService, parlay_to_dict

router = APIRouter(prefix="/parlays", tags=["parlays"], dependencies=[Depends(get_api_key)])


class ParlayPickModel(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=255)
    prop_type: str = Field(..., min_length=1, max_length=100)
    line: float
    bet_type: Literal["over", "under"]
    odds: str = Field(..., min_length=1, max_length=10)
    confidence: float = Field(..., ge=0, le=100)


class CreateParlayRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=200)
    picks: List[ParlayPickModel] = Field(..., min_length=1)
    game_info: Optional[Dict[str, Any]] = None
    notes: Optional[str] = Field(None, max_length=2000)


@router.post("", status_code=201)
async def create_parlay(request: CreateParlayRequest, db: Session = Depends(get_db)):
    """Save a parlay; total picks and average confidence are computed server-side."""
    parlay = ParlayService(db).create_parlay(
        user_id=request.user_id,
        name=request.name,
        picks=[p.model_dump() for p in request.picks],
        game_info=request.game_info,
        notes=request.notes,
    )
    return success(parlay_to_dict(parlay))


@router.get("")
async def list_parlays(
    user_id: str = Query(..., min_length=1, max_length=36),
    db: Session = Depends(get_db)
):
    parlays = ParlayService(db).list_parlays(user_id)
    return success({"parlays": [parlay_to_dict(p) for p in parlays], "count": len(parlays)})


@router.delete("/{parlay_id}")
async def delete_parlay(
    parlay_id: str,
    user_id: Optional[str] = Query(None, max_length=36),
    db: Session = Depends(get_db)
):
    if not ParlayService(db).delete_parlay(parlay_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Parlay not found")
    return success({"deleted": parlay_id})
