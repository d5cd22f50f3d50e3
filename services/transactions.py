# services/transactions.py - Commit helper translating lost races into Conflict
import logging
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from utils.errors import Conflict

logger = logging.getLogger(__name__)

def commit(db: Session, what: str):
    """Commit, turning an optimistic-lock failure into a Conflict for the caller."""
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent modification detected while saving {what}")
        raise Conflict(f"{what} was modified concurrently, please retry.")
