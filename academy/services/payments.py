"""缴费台账：只追加的记账记录。"""

import logging
from typing import Optional, Union

from sqlalchemy import select

from academy.db import StorageClient
from academy.errors import NotFound, ValidationError
from academy.models import PaymentRecord, PaymentStatus, User
from academy.schemas.academy import PaymentView
from academy.schemas.base import DB_INT_MAX

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


def _validate_amount(amount_cents) -> int:
    # bool 是 int 的子类，需要单独排除
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError("amountCents must be an integer")
    if amount_cents < 0:
        raise ValidationError("amountCents must not be negative")
    if amount_cents > DB_INT_MAX:
        raise ValidationError("amountCents is too large")
    return amount_cents


def _validate_currency(currency: Optional[str]) -> str:
    value = (currency or DEFAULT_CURRENCY).strip().upper()
    if len(value) != 3 or not value.isalpha():
        raise ValidationError("currency must be a 3-letter code")
    return value


def _validate_status(status) -> PaymentStatus:
    try:
        return PaymentStatus(status)
    except ValueError as exc:
        raise ValidationError("status must be one of pending, paid, failed, refunded") from exc


class PaymentLedger:
    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    def create(
        self,
        student_id: int,
        amount_cents: int,
        currency: Optional[str] = None,
        status: Union[PaymentStatus, str] = PaymentStatus.PENDING,
        note: Optional[str] = None,
    ) -> PaymentView:
        amount_cents = _validate_amount(amount_cents)
        currency = _validate_currency(currency)
        status = _validate_status(status)

        with self.storage.session() as db:
            if db.get(User, student_id) is None:
                raise NotFound("Student not found")
            payment = PaymentRecord(
                student_id=student_id,
                amount_cents=amount_cents,
                currency=currency,
                status=status,
                note=note or None,
            )
            db.add(payment)
            db.flush()
            result = PaymentView.model_validate(payment)
        logger.info(
            "Recorded payment %s for student %s: %s %s (%s)",
            result.id,
            student_id,
            amount_cents,
            currency,
            status.value,
        )
        return result

    def update_status(self, payment_id: int, status: Union[PaymentStatus, str]) -> PaymentView:
        """更新状态；不校验状态迁移是否合理。"""

        status = _validate_status(status)
        with self.storage.session() as db:
            payment = db.get(PaymentRecord, payment_id)
            if payment is None:
                raise NotFound("Payment not found")
            payment.status = status
            db.flush()
            return PaymentView.model_validate(payment)

    def list_for_student(self, student_id: int) -> list[PaymentView]:
        stmt = (
            select(PaymentRecord)
            .where(PaymentRecord.student_id == student_id)
            .order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc())
        )
        with self.storage.session() as db:
            return [PaymentView.model_validate(row) for row in db.scalars(stmt)]

    def list_all(self) -> list[PaymentView]:
        stmt = select(PaymentRecord).order_by(
            PaymentRecord.created_at.desc(), PaymentRecord.id.desc()
        )
        with self.storage.session() as db:
            return [PaymentView.model_validate(row) for row in db.scalars(stmt)]
