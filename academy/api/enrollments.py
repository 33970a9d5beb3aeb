"""选课 API（学生）。"""

from typing import List

from fastapi import APIRouter, Depends

from academy.dependencies import ServicesDep, require_roles
from academy.schemas.academy import EnrollmentView, EnrollRequest, EnrollResult
from academy.services.guard import STUDENTS

router = APIRouter()


@router.post("/enroll", response_model=EnrollResult)
def enroll(data: EnrollRequest, services: ServicesDep, claims=Depends(require_roles(STUDENTS))):
    """重复选课不是错误，返回 ``created=false``。"""
    return services.enrollments.enroll(data.class_id, claims.subject_id)


@router.get("/my-enrollments", response_model=List[EnrollmentView])
def my_enrollments(services: ServicesDep, claims=Depends(require_roles(STUDENTS))):
    return services.enrollments.list_for_student(claims.subject_id)
