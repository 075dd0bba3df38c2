import os
import sys

import pytest
from pydantic import ValidationError

# Ensure we can import "error_mapper.*" both from a checkout and an installed tree
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
CANDIDATE_PATHS = [
    os.path.join(REPO_ROOT, "backend"),
    REPO_ROOT,
]
for p in CANDIDATE_PATHS:
    if os.path.isdir(p) and p not in sys.path:
        sys.path.insert(0, p)

from error_mapper.api.middleware import ErrorHandlerMiddleware  # noqa: E402
from error_mapper.core.config import Settings  # noqa: E402
from error_mapper.services.dispatcher import ErrorHandler  # noqa: E402
from error_mapper.services.mappings import Options  # noqa: E402


def test_defaults(monkeypatch):
    for name in (
        "ERROR_MAPPER_LOG_LEVEL",
        "ERROR_MAPPER_DEFAULT_ERROR_STATUS",
        "ERROR_MAPPER_EXPOSE_ERROR_DETAIL",
        "ERROR_MAPPER_RECORD_RAISED_EXCEPTIONS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings(_env_file=None)
    assert s.LOG_LEVEL == "INFO"
    assert s.DEFAULT_ERROR_STATUS == 500
    assert s.EXPOSE_ERROR_DETAIL is False
    assert s.RECORD_RAISED_EXCEPTIONS is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ERROR_MAPPER_LOG_LEVEL", " debug ")
    monkeypatch.setenv("ERROR_MAPPER_DEFAULT_ERROR_STATUS", "503")
    monkeypatch.setenv("ERROR_MAPPER_EXPOSE_ERROR_DETAIL", "true")
    monkeypatch.setenv("ERROR_MAPPER_RECORD_RAISED_EXCEPTIONS", "1")

    s = Settings(_env_file=None)
    assert s.LOG_LEVEL == "DEBUG"
    assert s.DEFAULT_ERROR_STATUS == 503
    assert s.EXPOSE_ERROR_DETAIL is True
    assert s.RECORD_RAISED_EXCEPTIONS is True


def test_default_status_must_be_an_error_status(monkeypatch):
    monkeypatch.setenv("ERROR_MAPPER_DEFAULT_ERROR_STATUS", "200")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_middleware_reads_record_raised_from_settings(monkeypatch):
    import error_mapper.api.middleware as middleware_module

    handler = ErrorHandler(Options(default_response=lambda context: None))

    monkeypatch.setattr(middleware_module.settings, "RECORD_RAISED_EXCEPTIONS", True)
    assert ErrorHandlerMiddleware(app=None, handler=handler).record_raised is True
    assert ErrorHandlerMiddleware(app=None, handler=handler, record_raised=False).record_raised is False
