"""培训机构后台 API：身份认证、选课、考勤、缴费与公告。"""

__version__ = "0.1.0"
