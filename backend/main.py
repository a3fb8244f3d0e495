# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging
from social_api.core.admin import setup_admin
from social_api.api.deps import limiter
from social_api.api.routes import api_router
from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.core.middleware import request_logger, security_headers
from social_api.core.storage import object_store
from social_api.core.exceptions import AppException, AuthenticationError
from social_api.core.validation import format_errors

# Настройка логирования
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Контекстный менеджер для жизненного цикла приложения"""
    # Startup
    logger.info(f"🚀 Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")

    # Маскируем пароль в URL для логов
    masked_db_url = settings.db.DATABASE_URL.replace(
        settings.db.DB_PASSWORD.get_secret_value(), "***"
    )
    logger.info(f"📝 Database: {masked_db_url}")

    try:
        await db_helper.ping()
        logger.info("✅ Database connection successful")
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        raise

    # Хранилище файлов инициализируется после БД
    await object_store.initialize()

    setup_admin(app, db_helper.engine)

    yield

    # Shutdown
    await db_helper.dispose()
    logger.info("👋 Application shutdown complete")

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Порядок: последний добавленный middleware выполняется первым
app.middleware("http")(security_headers)
if settings.debug:
    app.middleware("http")(request_logger)

# Настройка CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Подключение роутеров
app.include_router(api_router, prefix="/api")

@app.get("/", summary="Root endpoint", tags=["root"])
async def root():
    """Корневой эндпоинт API"""
    return {
        "message": f"Welcome to {settings.app_name} API",
        "endpoints": {
            "health": "/health",
            "users": "/api/user",
            "posts": "/api/posts",
            "workouts": "/api/workouts",
        },
        "environment": "development" if settings.debug else "production",
        "timestamp": utc_now()
    }

@app.get("/health", summary="Health check", tags=["health"])
async def health_check():
    """Проверка здоровья приложения"""
    try:
        db_value = await db_helper.ping()
        return {
            "status": "healthy",
            "timestamp": utc_now(),
            "database": "connected",
            "database_ping": db_value,
            "object_store": "initialized" if object_store.initialized else "pending",
            "app_name": settings.app_name,
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": utc_now(),
                "database": "connection failed",
                "error": str(e) if settings.debug else "Database connection error"
            }
        )

# Глобальный обработчик исключений
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Глобальный обработчик кастомных исключений"""
    if exc.status_code >= 500:
        logger.error(f"AppException: {exc} (type: {type(exc).__name__})")
    else:
        logger.info(f"AppException: {exc.detail} (type: {type(exc).__name__})")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error": type(exc).__name__,
            "timestamp": utc_now()
        },
        headers=headers,
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Ошибки разбора запроса в общем формате, как ValidationError"""
    detail = format_errors(exc.errors())
    logger.info(f"Request validation failed: {detail}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": detail,
            "error": "ValidationError",
            "timestamp": utc_now()
        }
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик всех исключений"""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": "InternalServerError",
            "timestamp": utc_now(),
            "debug_info": str(exc) if settings.debug else None
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=4000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False  # Логи доступа пишет request_logger
    )
