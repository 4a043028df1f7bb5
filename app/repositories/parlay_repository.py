"""Saved parlay repository."""
from typing import List

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload

from app.models.models import Parlay
from app.repositories.base import BaseRepository


class ParlayRepository(BaseRepository[Parlay]):

    def __init__(self, db: Session):
        super().__init__(Parlay, db)

    def for_user(self, user_id: str) -> List[Parlay]:
        """A user's parlays with picks loaded, newest first."""
        return (
            self.query()
            .options(selectinload(Parlay.picks))
            .filter(Parlay.user_id == user_id)
            .order_by(desc(Parlay.created_at))
            .all()
        )
