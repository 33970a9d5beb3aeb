"""考勤 API。"""

from typing import List

from fastapi import APIRouter, Depends

from academy.dependencies import ServicesDep, require_roles
from academy.schemas.academy import AttendanceMark, AttendanceView
from academy.services.guard import STAFF, STUDENTS

router = APIRouter()


@router.post(
    "/attendance", response_model=AttendanceView, dependencies=[Depends(require_roles(STAFF))]
)
def mark_attendance(data: AttendanceMark, services: ServicesDep):
    """教师/管理员记录考勤，同一天重复提交覆盖原状态。"""
    return services.attendance.mark(data.class_id, data.student_id, data.status, data.date)


@router.get("/my-attendance", response_model=List[AttendanceView])
def my_attendance(services: ServicesDep, claims=Depends(require_roles(STUDENTS))):
    return services.attendance.list_for_student(claims.subject_id)
