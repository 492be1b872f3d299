"""Shared test configuration and fixtures."""

import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest

import transit_positions.core.config as config_module

_ISOLATED_ENV_VARS = ("VEHICLEPOS_DB_URL", "TRANSITVIEW_BASE_URL")


@pytest.fixture(autouse=True)
def _isolate_config() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Keep the developer's environment out of the packaged settings.

    ``settings.yaml`` reads ``VEHICLEPOS_DB_URL`` and friends from the
    environment (or a ``.env`` file), and ``get_config()`` caches the
    result.  Drop those variables and reset the cache around every test so
    CLI tests see the packaged defaults.
    """
    clean = {k: v for k, v in os.environ.items() if k not in _ISOLATED_ENV_VARS}
    config_module._config = None  # pyright: ignore[reportPrivateUsage]
    with (
        patch.dict(os.environ, clean, clear=True),
        patch.object(config_module, "load_dotenv"),
    ):
        yield
    config_module._config = None  # pyright: ignore[reportPrivateUsage]
