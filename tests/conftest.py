# tests/conftest.py
"""Shared test fixtures and helpers.

Test doubles for the injected collaborators (Decoder, Linker,
ServiceProcess, health-checked clients) live in tests/fixtures/stubs.py.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from tests.fixtures.elasticsearch import elasticsearch_storage
from tests.fixtures.stubs import FixedLinkerFactory, JsonSpanDecoder


@pytest.fixture
def decoder() -> JsonSpanDecoder:
    return JsonSpanDecoder()


@pytest.fixture
def linker_factory() -> FixedLinkerFactory:
    return FixedLinkerFactory()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


__all__ = [
    "decoder",
    "elasticsearch_storage",
    "linker_factory",
]
