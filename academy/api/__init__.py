"""API 路由包入口。"""

from fastapi import APIRouter

from academy.api import announcements, attendance, auth, classes, enrollments, payments, users

router = APIRouter()

# 注册子路由
router.include_router(auth.router, prefix="/auth", tags=["认证"])
router.include_router(users.router, prefix="/users", tags=["用户"])
router.include_router(classes.router, prefix="/classes", tags=["课程"])
router.include_router(announcements.router, prefix="/announcements", tags=["公告"])
router.include_router(enrollments.router, tags=["选课"])
router.include_router(attendance.router, tags=["考勤"])
router.include_router(payments.router, tags=["缴费"])
