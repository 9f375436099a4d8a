import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.log import Log

logger = logging.getLogger(__name__)


def write_log(db: Session, *, actor, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(actor=actor, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        # Audit entries are best-effort once the audited change is committed
        db.rollback()
        logger.exception("Failed to write audit log %s/%s for %s", action, status, actor)


def client_ip(request):
    return request.client.host if request is not None and request.client else None
