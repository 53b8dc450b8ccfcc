import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .crud import ExpenseStore
from .errors import StorageError, ValidationError
from .logging_config import setup_logging
from .schemas import ErrorBody, ExpenseCreate, ExpenseRecord
from .service import ExpenseService

LOGGER = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
NOT_FOUND_MESSAGE = "Resource not found"


def _error_response(
    status_code: int, message: str, headers: Optional[dict] = None
) -> JSONResponse:
    body = ErrorBody(error=message, status=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def get_service(request: Request) -> ExpenseService:
    """Dependency returning the service bound to this application."""
    return request.app.state.expense_service


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, _describe_request_error(exc))

    @app.exception_handler(StorageError)
    async def handle_storage_error(_: Request, exc: StorageError) -> JSONResponse:
        # Details are logged where the error is raised; clients get a generic message.
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ExpenseStore] = None,
) -> FastAPI:
    """Build the API around ``store``.

    When no store is given one is created from ``settings.database_url``.
    The table is created on startup if it is missing.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)
    store = store or ExpenseStore.from_url(settings.database_url)
    service = ExpenseService(store)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        LOGGER.info("Using database %s", store.engine.url)
        store.ensure_schema()
        yield

    app = FastAPI(
        title=settings.title,
        description="A personal finance expense tracker API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.expense_store = store
    app.state.expense_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    @app.get("/", tags=["Health"])
    def root():
        return {"status": "ok", "message": "Expense Tracker API is running."}

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "healthy"}

    @app.post(
        "/expenses",
        response_model=ExpenseRecord,
        status_code=status.HTTP_201_CREATED,
        tags=["Expenses"],
        summary="Record a new expense",
        responses={400: {"model": ErrorBody}, 500: {"model": ErrorBody}},
    )
    def add_expense(
        expense_in: ExpenseCreate,
        service: ExpenseService = Depends(get_service),
    ):
        """
        Record an expense.

        - `amount` must be at least 0.01.
        - `category` must be 1 to 50 characters; it is stored as sent.
        - The id and date are assigned by the server.
        """
        return service.add_expense(expense_in)

    @app.get(
        "/expenses",
        response_model=list[ExpenseRecord],
        tags=["Expenses"],
        summary="List every expense, newest first",
        responses={500: {"model": ErrorBody}},
    )
    def get_all_expenses(service: ExpenseService = Depends(get_service)):
        return service.get_all_expenses()

    @app.get(
        "/expenses/highest",
        response_model=ExpenseRecord,
        tags=["Expenses"],
        summary="Get the largest expense",
        responses={404: {"model": ErrorBody}, 500: {"model": ErrorBody}},
    )
    def get_highest_expense(service: ExpenseService = Depends(get_service)):
        """Returns 404 when no expense has been recorded yet."""
        expense = service.get_highest_expense()
        if expense is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
        return expense

    return app


def run() -> None:
    """Serve the API with uvicorn, building the app inside the server process."""
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "expense_tracker.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )
