"""Test configuration and fixtures for the product catalog."""

import os

# Must be set before the application context loads config.yaml
os.environ.setdefault("APP_ENVIRONMENT", "test")

from tests.fixtures import *  # noqa: E402,F401,F403
