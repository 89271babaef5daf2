"""Append-only audit and notification logs."""

import logging
from pathlib import Path

from bvdu_bank.models import AuditEntry, Notification
from bvdu_bank.models.base import Clock, local_now
from bvdu_bank.store.codec import AUDIT_CODEC, NOTIFICATION_CODEC
from bvdu_bank.store.files import append_record, load_table, touch

logger = logging.getLogger(__name__)


class AuditLog:
    """Timestamped event sink shared by every service.

    Administrator-visible events go to the audit file; messages addressed
    to a customer go to the notification file. Neither file is ever
    rewritten.
    """

    def __init__(self, audit_path: Path, notifications_path: Path, clock: Clock = local_now) -> None:
        self.audit_path = Path(audit_path)
        self.notifications_path = Path(notifications_path)
        self._clock = clock

    def audit(self, entry: str) -> AuditEntry:
        """Append an audit entry such as ``BUY|1001|AAPL|2.0000|31730.00INR``."""
        record = AuditEntry(timestamp=self._clock(), entry=entry)
        append_record(self.audit_path, AUDIT_CODEC, record)
        logger.debug("Audit: %s", entry)
        return record

    def notify(self, account_number: int, message: str) -> Notification:
        """Append a notification for one account."""
        record = Notification(timestamp=self._clock(), account_number=account_number, message=message)
        append_record(self.notifications_path, NOTIFICATION_CODEC, record)
        return record

    def entries(self) -> list[AuditEntry]:
        return load_table(self.audit_path, AUDIT_CODEC)

    def notifications_for(self, account_number: int) -> list[Notification]:
        return [
            n
            for n in load_table(self.notifications_path, NOTIFICATION_CODEC)
            if n.account_number == account_number
        ]

    def ensure_files(self) -> None:
        touch(self.audit_path)
        touch(self.notifications_path)
