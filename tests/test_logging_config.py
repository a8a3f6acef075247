import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from supportbot.logging_config import HealthCheckFilter, get_logging_config


def make_record(name, message):
    return logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)


def test_health_probe_access_lines_are_dropped():
    health_filter = HealthCheckFilter()

    assert not health_filter.filter(make_record("uvicorn.access", '"GET /healthz HTTP/1.1" 200'))
    assert not health_filter.filter(make_record("uvicorn.access", '"GET /health HTTP/1.1" 503'))
    assert health_filter.filter(make_record("uvicorn.access", '"GET /sessions HTTP/1.1" 200'))
    assert health_filter.filter(make_record("supportbot", "GET /healthz"))


def test_level_applies_to_app_and_root():
    config = get_logging_config("debug")

    assert config["loggers"]["supportbot"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["uvicorn.access"]["level"] == "INFO"
