import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from config import DEBUG, APP_HOST, APP_PORT, LOG_LEVEL
from database.init import Base, engine
from responses.error import (
    error_from_status,
    internal_server_error,
    unauthorized_error,
    validation_error,
)
from routes import auth_routes, booking_routes, kos_routes, review_routes, user_routes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Kos Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(kos_routes.router)
app.include_router(review_routes.router)
app.include_router(booking_routes.router)
app.include_router(user_routes.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return validation_error("Invalid input data", details=details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 401:
        # The bearer scheme reports a missing header as "Not authenticated"
        if exc.detail == "Not authenticated":
            return unauthorized_error()
        return unauthorized_error(exc.detail)
    message = exc.detail if isinstance(exc.detail, str) else None
    return error_from_status(exc.status_code, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return internal_server_error("Unexpected server error")


@app.get("/")
def read_root():
    return {"name": "Kos Booking API", "version": "1.0.0"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=APP_HOST, port=APP_PORT, reload=DEBUG)
