# social_api/core/exceptions.py
from fastapi import status

class AppException(Exception):
    """Базовое исключение для приложения"""
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail

class AuthenticationError(AppException):
    """Ошибка аутентификации"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)

class AuthorizationError(AppException):
    """Ошибка авторизации"""
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class ValidationError(AppException):
    """Ошибка валидации данных"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)

class NotFoundError(AppException):
    """Ресурс не найден"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class ObjectNotFoundError(NotFoundError):
    """В хранилище нет объекта с таким id или именем"""
    def __init__(self, detail: str = "File not found"):
        super().__init__(detail)

class PayloadTooLargeError(AppException):
    """Превышен лимит размера загрузки"""
    def __init__(self, detail: str = "Payload too large"):
        super().__init__(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail)

class RateLimitError(AppException):
    """Ошибка превышения лимита запросов"""
    def __init__(self, detail: str = "Too many requests"):
        super().__init__(status.HTTP_429_TOO_MANY_REQUESTS, detail)

class StorageError(AppException):
    """
    Ошибка хранилища файлов.
    Клиент видит только detail, подробности (id файла, номер чанка) остаются в str(exc) для логов.
    """
    def __init__(self, message: str = "Storage error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage error")
        self.message = message

    def __str__(self):
        return self.message
