"""
Base service implementation with common functionality for all services.

Services own (or borrow) a SQLAlchemy session, apply the per-call store
timeout and translate driver failures into the typed error taxonomy.
"""

from contextlib import contextmanager
from typing import Iterator, NoReturn, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from ..config import get_config
from ..db.db_config import get_db_manager
from ..exceptions import BaseError, ErrorCode, ServiceError, TransportError
from ..utils.logger import ContextAwareLogger, get_logger


class SessionManagedService:
    """
    Service that owns and manages its own database session.

    Pass ``session`` to share a caller-managed session (tests, or several
    services in one unit of work); the caller then commits.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[ContextAwareLogger] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize service with its own session.

        Args:
            session: Optional existing session (for testing or coordination)
            logger: Optional logger instance
            timeout: Default per-call backing store timeout in seconds
        """
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = self._create_session()
            self._owns_session = True

        self.logger = logger or get_logger()
        self.config = get_config()
        self.platform_id = self.config.platform.platform_id
        self.default_timeout = (
            timeout if timeout is not None else self.config.database.statement_timeout
        )

    def _create_session(self) -> Session:
        """Create a new database session from the global database manager."""
        return get_db_manager().new_session()

    def _apply_timeout(self, timeout: Optional[float]) -> None:
        effective = timeout if timeout is not None else self.default_timeout
        if not effective or self.session.bind.dialect.name != "postgresql":
            return
        # SET does not take bind parameters; the value is an int by construction
        self.session.execute(text(f"SET LOCAL statement_timeout = {int(effective * 1000)}"))

    @contextmanager
    def store_call(self, operation: str, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Wrap one call to the backing store.

        Our typed errors pass through; unreachable stores and expired
        timeouts become TransportError; anything else becomes ServiceError.
        """
        try:
            self._apply_timeout(timeout)
            yield
        except BaseError:
            raise
        except PoolTimeoutError as e:
            self._raise_transport(operation, e, timed_out=True)
        except (OperationalError, InterfaceError) as e:
            self._raise_transport(operation, e, timed_out="timeout" in str(e).lower())
        except DBAPIError as e:
            if e.connection_invalidated:
                self._raise_transport(operation, e, timed_out=False)
            self._handle_service_exception(operation, e)
        except Exception as e:
            self._handle_service_exception(operation, e)

    def _raise_transport(self, operation: str, exception: Exception, timed_out: bool) -> NoReturn:
        if self.session.in_transaction():
            self.session.rollback()
        raise TransportError(
            f"Backing store {'timed out' if timed_out else 'unavailable'} during {operation}",
            error_code=ErrorCode.TIMEOUT_ERROR if timed_out else ErrorCode.CONNECTION_ERROR,
            operation=operation,
            cause=exception,
        ) from exception

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[str] = None
    ) -> NoReturn:
        """
        Log and wrap an unexpected exception in ServiceError.
        """
        error_msg = f"Error in {operation}: {str(exception)}"
        self.logger.error(
            error_msg,
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
            },
            exc_info=True,
        )
        raise ServiceError(
            error_msg,
            error_code=ErrorCode.INTERNAL_ERROR,
            operation=operation,
            entity_id=entity_id,
            cause=exception,
        ) from exception

    @contextmanager
    def transaction(self):
        """
        Context manager for transactional operations.

        Usage:
            with service.transaction():
                service.create(...)
                # Auto-commits on success, rollback on exception
        """
        try:
            yield self.session
            self.commit()
        except Exception:
            if self._owns_session:
                self.session.rollback()
            raise

    def commit(self):
        if self._owns_session:
            # timeout=0 skips SET LOCAL, the transaction is ending anyway
            with self.store_call("commit", timeout=0):
                self.session.commit()

    def rollback(self):
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit on success, roll back on error, then close an owned session."""
        try:
            if exc_type:
                self.rollback()
            else:
                self.commit()
        finally:
            self.close()
