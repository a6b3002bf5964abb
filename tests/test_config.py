"""Unit tests for memantra.core.config: JWT secret startup guards and token lifetime parsing."""

import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from memantra.core.config import Settings, parse_expires_in

STRONG_SECRET = "k" * 40


def _settings(**kwargs: object) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestParseExpiresIn(unittest.TestCase):
    """parse_expires_in accepts seconds or duration strings."""

    def test_numeric(self) -> None:
        self.assertEqual(parse_expires_in(3600), 3600)
        self.assertEqual(parse_expires_in("3600"), 3600)

    def test_duration_strings(self) -> None:
        self.assertEqual(parse_expires_in("1d"), 86400)
        self.assertEqual(parse_expires_in("12h"), 43200)
        self.assertEqual(parse_expires_in("90m"), 5400)
        self.assertEqual(parse_expires_in("2 weeks"), 1209600)
        self.assertEqual(parse_expires_in("1.5h"), 5400)
        self.assertEqual(parse_expires_in(" 30S "), 30)

    def test_rejects_invalid(self) -> None:
        for value in ("soon", "10 fortnights", "-5", "0", 0, "h"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_expires_in(value)


class TestJwtSecretGuard(unittest.TestCase):
    """Settings refuses to load without a usable JWT_SECRET."""

    def test_missing_secret_rejected_in_every_environment(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("JWT_SECRET", None)
            for env in ("dev", "prod", "test"):
                with self.subTest(env=env):
                    with self.assertRaises(ValidationError) as ctx:
                        _settings(APP_ENV=env)
                    self.assertIn("JWT_SECRET is not defined", str(ctx.exception))

    def test_blank_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="test", JWT_SECRET="   ")

    def test_placeholder_rejected_outside_test(self) -> None:
        for env in ("dev", "prod"):
            with self.subTest(env=env):
                with self.assertRaises(ValidationError) as ctx:
                    _settings(APP_ENV=env, JWT_SECRET="change-me-in-production")
                self.assertIn("Insecure JWT secret", str(ctx.exception))

    def test_short_secret_rejected_outside_test(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            _settings(APP_ENV="prod", JWT_SECRET="s" * 31)
        self.assertIn("too short", str(ctx.exception))

    def test_short_or_placeholder_secret_allowed_in_test(self) -> None:
        self.assertEqual(_settings(APP_ENV="test", JWT_SECRET="testjwtsecret").APP_ENV, "test")
        self.assertEqual(_settings(APP_ENV="test", JWT_SECRET="short").APP_ENV, "test")

    def test_strong_secret_accepted_in_prod(self) -> None:
        s = _settings(APP_ENV="prod", JWT_SECRET=STRONG_SECRET)
        self.assertEqual(s.JWT_SECRET.get_secret_value(), STRONG_SECRET)


class TestOtherSettings(unittest.TestCase):
    """Defaults and validation of the remaining auth-related settings."""

    def test_expiry_defaults_to_one_day(self) -> None:
        s = _settings(APP_ENV="test", JWT_SECRET=STRONG_SECRET, JWT_EXPIRES_IN="")
        self.assertEqual(s.jwt_expires_in_seconds, 86400)

    def test_invalid_expiry_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="test", JWT_SECRET=STRONG_SECRET, JWT_EXPIRES_IN="whenever")

    def test_non_postgres_database_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="test", JWT_SECRET=STRONG_SECRET, DATABASE_URL="mysql://x/y")

    def test_allowed_origins_split(self) -> None:
        s = _settings(
            APP_ENV="test",
            JWT_SECRET=STRONG_SECRET,
            ALLOWED_ORIGINS="http://a.test, http://b.test,",
        )
        self.assertEqual(s.allowed_origins, ["http://a.test", "http://b.test"])

    def test_blank_google_client_id_is_none(self) -> None:
        s = _settings(APP_ENV="test", JWT_SECRET=STRONG_SECRET, GOOGLE_CLIENT_ID="  ")
        self.assertIsNone(s.GOOGLE_CLIENT_ID)
