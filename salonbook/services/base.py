# salonbook/services/base.py
"""
Base Service Pattern for the booking engine.

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Clock injection
- Performance monitoring
"""

from contextlib import contextmanager
from datetime import datetime
from functools import wraps
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.clock import Clock, SystemClock
from ..core.exceptions import OperationCancelledException, RepositoryException, ServiceException
from ..database import READ_ONLY_OPTION

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Every mutating operation runs inside exactly one transaction() block,
    which commits on success and rolls back on any exception, so callers
    never observe a partially applied change.
    """

    # Class-level metrics storage
    _class_metrics: Dict[str, Dict[str, Dict[str, float]]] = {}

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        """
        Initialize base service.

        Args:
            db: Database session
            clock: Source of "now"; defaults to the system clock
        """
        self.db = db
        self.clock: Clock = clock or SystemClock()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.cancellation: Optional[threading.Event] = None

    def now(self) -> datetime:
        return self.clock.now()

    def bind_cancellation(self, cancellation: threading.Event) -> None:
        """Attach the calling request's cancellation flag; a set flag vetoes every commit."""
        self.cancellation = cancellation

    def is_cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.db.add(entity)
                # Note: commit is handled automatically

        If the calling request was cancelled meanwhile, the work is rolled
        back and OperationCancelledException raised instead of committing.
        """
        try:
            yield self.db
            if self.is_cancelled():
                self.logger.warning("Request cancelled, rolling back instead of committing")
                raise OperationCancelledException()
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except BaseException:
            # Domain errors and request cancellation alike leave nothing behind
            self.db.rollback()
            raise

    def begin_read(self) -> bool:
        """
        Open a read-only transaction unless one is already in progress.

        On SQLite this begins DEFERRED rather than IMMEDIATE, so a slow
        reader never holds the write lock. Returns True when this call
        opened the transaction and end_read() should release it.
        """
        if self.db.in_transaction():
            return False
        self.db.connection(execution_options={READ_ONLY_OPTION: True})
        return True

    def end_read(self, owns_transaction: bool) -> None:
        """Release a read-only transaction, but only one this service opened."""
        if owns_transaction and self.db.in_transaction():
            self.db.rollback()

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                success = False
                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                finally:
                    elapsed = time.time() - start_time
                    self._record_metric(operation_name, elapsed, success)
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log an operation with context."""
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        class_name = self.__class__.__name__
        metrics = BaseService._class_metrics.setdefault(class_name, {})
        metric_data = metrics.setdefault(
            operation,
            {
                "count": 0,
                "total_time": 0.0,
                "success_count": 0,
                "failure_count": 0,
                "max_time": 0.0,
            },
        )
        metric_data["count"] += 1
        metric_data["total_time"] += elapsed
        metric_data["max_time"] = max(metric_data["max_time"], elapsed)
        if success:
            metric_data["success_count"] += 1
        else:
            metric_data["failure_count"] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Get performance metrics for this service."""
        result = {}
        for operation, data in BaseService._class_metrics.get(self.__class__.__name__, {}).items():
            count = data["count"]
            if count == 0:
                continue
            result[operation] = {
                "count": count,
                "avg_time": data["total_time"] / count,
                "max_time": data["max_time"],
                "success_rate": data["success_count"] / count,
            }
        return result
