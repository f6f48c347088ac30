from functools import lru_cache

from stackmentor.core.config import settings
from stackmentor.core.database import get_db  # noqa: F401
from stackmentor.services.mailer import EmailSender, build_email_sender


@lru_cache
def get_email_sender() -> EmailSender:
    return build_email_sender(settings)
