"""
Shared fixtures for codegraph-moniker tests
"""

import pytest
import structlog

from codegraph_moniker import MonikerIndexPass, MonikerSettings, ProgramBuilder
from codegraph_moniker.infrastructure.config import get_settings

ROOT = "/@test"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> MonikerSettings:
    return MonikerSettings(scheme="tsc", local_digest_bytes=16, emit_definition_items=True)


@pytest.fixture
def builder() -> ProgramBuilder:
    return ProgramBuilder(ROOT)


@pytest.fixture
def builder_factory():
    """Fresh builders for tests that compare several programs"""
    return lambda: ProgramBuilder(ROOT)


@pytest.fixture
def run(settings):
    """Run one pass over a builder's program"""

    def _run(program_builder: ProgramBuilder, **overrides):
        effective = settings.model_copy(update=overrides) if overrides else settings
        return MonikerIndexPass(program_builder.build(), settings=effective).run()

    return _run


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()
