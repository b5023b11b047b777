"""
业务异常
服务层抛出，由 main 中注册的处理器统一转换为 HTTP 响应。
"""


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """输入缺失或格式错误"""
    status_code = 400


class AuthenticationRequired(AppError):
    """未登录或登录已失效"""
    status_code = 401

    def __init__(self, message: str = "请先登录"):
        super().__init__(message)


class PermissionDenied(AppError):
    """权限不足"""
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    """唯一性冲突，如用户名已被使用"""
    status_code = 409
