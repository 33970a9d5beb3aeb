"""缴费 API。"""

from typing import List

from fastapi import APIRouter, Depends

from academy.dependencies import PathId, ServicesDep, require_roles
from academy.schemas.academy import PaymentCreate, PaymentStatusUpdate, PaymentView
from academy.services.guard import ADMINS, STUDENTS

router = APIRouter()


@router.get("/my-payments", response_model=List[PaymentView])
def my_payments(services: ServicesDep, claims=Depends(require_roles(STUDENTS))):
    return services.payments.list_for_student(claims.subject_id)


@router.post("/payments", response_model=PaymentView, dependencies=[Depends(require_roles(ADMINS))])
def create_payment(data: PaymentCreate, services: ServicesDep):
    """管理员为学生登记一笔费用/缴费。"""
    return services.payments.create(
        student_id=data.student_id,
        amount_cents=data.amount_cents,
        currency=data.currency,
        status=data.status,
        note=data.note,
    )


@router.get("/payments", response_model=List[PaymentView], dependencies=[Depends(require_roles(ADMINS))])
def list_payments(services: ServicesDep):
    return services.payments.list_all()


@router.patch(
    "/payments/{payment_id}",
    response_model=PaymentView,
    dependencies=[Depends(require_roles(ADMINS))],
)
def update_payment_status(payment_id: PathId, data: PaymentStatusUpdate, services: ServicesDep):
    return services.payments.update_status(payment_id, data.status)
