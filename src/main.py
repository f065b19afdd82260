import tomllib
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.ai.base import ErrorResponse
from src.ai.chat.router import router as chat_router
from src.config import get_app_settings
from src.utils.logger import logger


def get_version():
    """Get version from pyproject.toml"""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return "0.0.0"
    return data["project"]["version"]


app = FastAPI(
    title="Dinemap API",
    description="Streaming restaurant chat for Amsterdam",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_app_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of FastAPI's 422."""
    errors = exc.errors()
    logger.warning(
        "Invalid request body",
        path=request.url.path,
        error_types=[error.get("type") for error in errors],
    )
    details = None
    if get_app_settings().expose_error_details:
        details = {"errors": jsonable_encoder(errors)}
    body = ErrorResponse(error="Invalid request body", details=details)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "Dinemap API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "Dinemap API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080, log_level="info")
