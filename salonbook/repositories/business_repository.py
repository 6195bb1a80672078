# salonbook/repositories/business_repository.py
"""
Repository for businesses, their providers, and their service catalogue.

Also home of the provider row lock that serializes concurrent writers
competing for the same provider's time.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.business import Business, BusinessHours
from ..models.provider import Provider, Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BusinessRepository(BaseRepository[Business]):
    def __init__(self, db: Session):
        super().__init__(db, Business)

    def get_hours(self, business_id: str) -> List[BusinessHours]:
        return (
            self.db.query(BusinessHours)
            .filter(BusinessHours.business_id == business_id)
            .order_by(BusinessHours.weekday, BusinessHours.start_time)
            .all()
        )

    def replace_hours(self, business_id: str, rows: Iterable[BusinessHours]) -> List[BusinessHours]:
        """Swap the full weekly schedule of a business."""
        try:
            self.db.query(BusinessHours).filter(BusinessHours.business_id == business_id).delete(
                synchronize_session="fetch"
            )
            created = []
            for row in rows:
                row.business_id = business_id
                self.db.add(row)
                created.append(row)
            self.db.flush()
            return created
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing hours for business {business_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace business hours: {str(e)}")


class ProviderRepository(BaseRepository[Provider]):
    def __init__(self, db: Session):
        super().__init__(db, Provider)

    def get_with_services(self, provider_id: str) -> Optional[Provider]:
        return (
            self.db.query(Provider)
            .options(selectinload(Provider.services), selectinload(Provider.business))
            .filter(Provider.id == provider_id)
            .first()
        )

    def get_many(self, provider_ids: Sequence[str]) -> List[Provider]:
        return (
            self.db.query(Provider)
            .options(selectinload(Provider.services))
            .filter(Provider.id.in_(list(provider_ids)))
            .all()
        )

    def lock_providers(self, provider_ids: Iterable[str]) -> List[Provider]:
        """
        Take the write lock that serializes booking writes per provider.

        Rows are locked in id order so two writers holding overlapping sets
        cannot deadlock. On SQLite the surrounding BEGIN IMMEDIATE already
        holds the database write lock, so the plain read is enough.
        """
        ordered = sorted(set(provider_ids))
        try:
            query = self.db.query(Provider).filter(Provider.id.in_(ordered)).order_by(Provider.id)
            if self.supports_row_locks:
                query = query.with_for_update()
            locked = query.all()
            self.logger.debug("Locked providers %s", ordered)
            return locked
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking providers {ordered}: {str(e)}")
            raise RepositoryException(f"Failed to lock providers: {str(e)}")


class ServiceRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_many(self, service_ids: Sequence[str]) -> List[Service]:
        return self.db.query(Service).filter(Service.id.in_(list(service_ids))).all()
