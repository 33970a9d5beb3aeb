"""业务异常体系。

每个异常携带对外可见的 ``detail`` 与对应的 HTTP 状态码，由
``academy.main`` 中注册的异常处理器统一转换为 JSON 响应。存储层原始错误
信息永远不会出现在 ``detail`` 中。
"""


class AcademyError(Exception):
    """所有业务异常的基类。"""

    status_code = 500
    default_detail = "Server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AcademyError):
    """输入不合法：缺少必填字段、金额非整数、角色不存在等。"""

    status_code = 400
    default_detail = "Invalid input"


class DuplicateIdentity(AcademyError):
    """用户名或邮箱已被占用。"""

    status_code = 400
    default_detail = "User with this username or email already exists"


class Unauthenticated(AcademyError):
    """缺少 Token 或 Token 无效/过期，刻意不区分具体原因。"""

    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(AcademyError):
    """Token 有效但角色不在允许集合内。"""

    status_code = 403
    default_detail = "Forbidden"


class NotFound(AcademyError):
    status_code = 404
    default_detail = "Not found"


class StorageError(AcademyError):
    """底层持久化失败；对调用方只暴露通用错误。"""

    status_code = 500
    default_detail = "Server error"


class InvalidToken(Exception):
    """Token 签名不符、结构损坏或已过期。

    只在 Token Service 内部抛出，由 Authorization Guard 转换为
    ``Unauthenticated``。
    """
