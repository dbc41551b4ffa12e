import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError, OperationalError
from sqlalchemy.orm import Session

from ecocred.extensions import db  # Centralized SQLAlchemy instance
from ecocred.errors import LedgerError

logger = logging.getLogger(__name__)


@contextmanager
def get_session_scope():
    """
    Provide a transactional scope for database operations.

    Usage:
        with get_session_scope() as session:
            session.add(...)
            # commit happens automatically unless an exception occurs

    Every exception rolls the whole session back and is re-raised, so a
    rejected ledger operation never leaves partial state behind.
    """
    session: Session = db.session
    try:
        yield session
        session.commit()
    except LedgerError as e:
        logger.warning(f"Ledger transaction reverted ({e.kind}): {e}")
        session.rollback()
        raise
    except (OperationalError, SQLAlchemyError) as e:
        logger.error(f"Database error during scoped session: {e}", exc_info=True)
        session.rollback()
        raise
    except Exception as e:
        logger.error(f"Unexpected error during scoped session: {e}", exc_info=True)
        session.rollback()
        raise
    finally:
        try:
            session.close()
        except Exception as e:
            logger.error(f"Error closing session: {e}", exc_info=True)
