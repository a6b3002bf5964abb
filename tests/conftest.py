"""Pytest configuration: test environment must be set before memantra modules are imported."""

import os

os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "unit-test-jwt-secret-value-0123456789abcdef0123456789abcdef012345"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ.pop("JWT_EXPIRES_IN", None)
