# salonbook/repositories/availability_repository.py
"""
Repository for recurring availability and unavailability windows.

Read-mostly reference data; nothing here is cached between calls because
schedules can change with any request.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityWindow, UnavailabilityWindow
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilityWindow]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilityWindow)

    def get_windows(self, provider_id: str, weekday: Optional[int] = None) -> List[AvailabilityWindow]:
        query = self.db.query(AvailabilityWindow).filter(
            AvailabilityWindow.provider_id == provider_id
        )
        if weekday is not None:
            query = query.filter(AvailabilityWindow.weekday == weekday)
        return query.order_by(AvailabilityWindow.weekday, AvailabilityWindow.start_time).all()

    def get_blocks(self, provider_id: str, weekday: Optional[int] = None) -> List[UnavailabilityWindow]:
        query = self.db.query(UnavailabilityWindow).filter(
            UnavailabilityWindow.provider_id == provider_id
        )
        if weekday is not None:
            query = query.filter(UnavailabilityWindow.weekday == weekday)
        return query.order_by(UnavailabilityWindow.weekday, UnavailabilityWindow.start_time).all()

    def get_block(self, block_id: str) -> Optional[UnavailabilityWindow]:
        return self.db.query(UnavailabilityWindow).filter(UnavailabilityWindow.id == block_id).first()

    def replace_windows(
        self, provider_id: str, rows: Iterable[AvailabilityWindow]
    ) -> List[AvailabilityWindow]:
        """Swap the full weekly availability of a provider."""
        try:
            self.db.query(AvailabilityWindow).filter(
                AvailabilityWindow.provider_id == provider_id
            ).delete(synchronize_session="fetch")
            created = []
            for row in rows:
                row.provider_id = provider_id
                self.db.add(row)
                created.append(row)
            self.db.flush()
            return created
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing availability for {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace availability: {str(e)}")

    def add_block(self, block: UnavailabilityWindow) -> UnavailabilityWindow:
        try:
            self.db.add(block)
            self.db.flush()
            return block
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding unavailability block: {str(e)}")
            raise RepositoryException(f"Failed to add unavailability block: {str(e)}")

    def delete_block(self, block: UnavailabilityWindow) -> None:
        try:
            self.db.delete(block)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting unavailability block {block.id}: {str(e)}")
            raise RepositoryException(f"Failed to delete unavailability block: {str(e)}")
