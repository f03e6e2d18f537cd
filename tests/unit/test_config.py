import pytest
from pydantic import ValidationError

from config import Settings


def make_settings(**overrides):
    values = {"JWT_ACCESS_SECRET": "a", "JWT_REFRESH_SECRET": "b", **overrides}
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()
        assert settings.JWT_ACCESS_EXPIRY_MINUTES == 15
        assert settings.JWT_REFRESH_EXPIRY_DAYS == 7
        assert settings.REFRESH_COOKIE_NAME == "refreshToken"

    def test_missing_jwt_secret_is_fatal(self, monkeypatch):
        monkeypatch.delenv("JWT_ACCESS_SECRET", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, JWT_REFRESH_SECRET="b")

    def test_empty_jwt_secret_is_fatal(self):
        with pytest.raises(ValidationError):
            make_settings(JWT_REFRESH_SECRET="")

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            make_settings(BCRYPT_SALT_ROUNDS=3)
        assert make_settings(BCRYPT_SALT_ROUNDS=12).BCRYPT_SALT_ROUNDS == 12

    def test_database_url_wins_over_parts(self):
        settings = make_settings(DATABASE_URL="postgresql://u:p@db:5432/app", POSTGRES_HOST="ignored")
        assert settings.POSTGRES_URL == "postgresql://u:p@db:5432/app"

    def test_postgres_url_from_parts(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = make_settings(POSTGRES_USER="u", POSTGRES_PASSWORD="p", POSTGRES_HOST="h", POSTGRES_DATABASE="d")
        assert settings.POSTGRES_URL == "postgresql://u:p@h:5432/d"

    def test_cors_origins_are_split_and_trimmed(self):
        settings = make_settings(CORS_ORIGINS="http://a.example.com, http://b.example.com,")
        assert settings.cors_origin_list == ["http://a.example.com", "http://b.example.com"]

    def test_production_flag(self):
        assert make_settings(NODE_ENV="production").is_production is True
        assert make_settings(NODE_ENV="test").is_production is False
