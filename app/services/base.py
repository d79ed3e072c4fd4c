import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings


class BaseService:
    """
    Common plumbing for service classes: the request-scoped session and the
    actor recorded in audit fields (created_by / updated_by / reviewed_by).
    """

    def __init__(self, db: Session, actor: Optional[str] = None):
        self.db = db
        self.actor = actor or settings.default_actor
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra={"actor": self.actor, **extra})

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra={"actor": self.actor, **extra})
