"""Root test configuration."""

import logging
import os

# X-Ray must be disabled before aws_xray_sdk is first imported.
os.environ.setdefault("AWS_XRAY_SDK_ENABLED", "false")
os.environ.setdefault("AWS_XRAY_CONTEXT_MISSING", "LOG_ERROR")

import pytest  # noqa: E402
import structlog  # noqa: E402

from computeforge.config import Settings  # noqa: E402
from computeforge.graph import build  # noqa: E402
from computeforge.intake import validate  # noqa: E402

VALID_BAG = {
    "project": "acme-prod",
    "network": "default",
    "instance_name": "web-1",
    "machine_type": "e2-medium",
    "zone": "us-central1-a",
    "device_name": "boot",
    "image": "debian-cloud/debian-12",
    "size": "20",
    "type": "pd-balanced",
    "address_name": "web-1-ip",
    "address_type": "EXTERNAL",
    "region": "us-central1",
    "network_tier": "PREMIUM",
    "additional_disk_name": "web-1-data",
    "additional_disk_type": "pd-ssd",
    "additional_disk_size": "100",
}

ADDRESS_ID = "address:acme-prod/us-central1/web-1-ip"
INSTANCE_ID = "instance:acme-prod/us-central1-a/web-1"
DISK_ID = "disk:acme-prod/us-central1-a/web-1-data"
ATTACHMENT_ID = "attachment:acme-prod/us-central1-a/web-1/web-1-data"


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def valid_bag():
    return dict(VALID_BAG)


@pytest.fixture
def config(valid_bag):
    return validate(valid_bag)


@pytest.fixture
def graph(config):
    return build(config)


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        compute_provider="memory",
        job_queue_backend="memory",
        github_token=None,
        pagerduty_token=None,
        github_webhook_secret=None,
        pagerduty_webhook_secret=None,
        http_retry_backoff_factor=0,
        parameter_defaults={},
    )
