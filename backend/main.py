from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from error_mapper.api import ErrorHandlerMiddleware, record_error, register_error_recording
from error_mapper.core.config import settings
from error_mapper.core.errors import default_error_response, error_response
from error_mapper.services.dispatcher import ErrorHandler
from error_mapper.services.mappings import Options, map_errors


class ApplicationError(Exception):
    def __init__(self, message: str = "custom error"):
        super().__init__(message)

    def __eq__(self, other):
        return isinstance(other, ApplicationError)

    __hash__ = Exception.__hash__


std_error = Exception("error")


def build_error_handler() -> ErrorHandler:
    options = Options().set_default_response(
        default_error_response(500, "internal server error")
    )
    options.set_error_mappings(
        [
            map_errors(ApplicationError()).to_response(
                error_response(500, "internal application error")
            ),
            map_errors(std_error).to_response(error_response(400, "bad request")),
            map_errors(RequestValidationError).to_response(
                error_response(422, expose_detail=True)
            ),
        ]
    )
    return ErrorHandler(options)


def create_app(handler: Optional[ErrorHandler] = None) -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    # Built once at startup and shared by every request
    app.add_middleware(ErrorHandlerMiddleware, handler=handler or build_error_handler())
    register_error_recording(app, RequestValidationError)

    @app.get("/ping")
    def ping(request: Request):
        record_error(request, ApplicationError())

    @app.get("/pong")
    def pong(request: Request):
        record_error(request, std_error)

    @app.get("/items/{item_id}")
    def get_item(item_id: int):
        return {"id": item_id}

    return app


app = create_app()
