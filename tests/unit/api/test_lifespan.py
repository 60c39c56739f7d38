"""Unit tests for application startup checks."""

import pytest

from core.config import settings
from core.exceptions import ConfigurationError


class TestLifespan:
    @pytest.mark.asyncio
    async def test_missing_signing_secret_aborts_startup(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from main import create_app, lifespan

        monkeypatch.setattr(settings, "jwt_secret_key", "")

        with pytest.raises(ConfigurationError) as exc_info:
            async with lifespan(create_app()):
                pass

        assert exc_info.value.details == {"setting": "JWT_SECRET_KEY"}

    @pytest.mark.asyncio
    async def test_configured_secret_starts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from main import create_app, lifespan

        monkeypatch.setattr(settings, "jwt_secret_key", "test-secret-key")
        started = False

        async with lifespan(create_app()):
            started = True

        assert started
