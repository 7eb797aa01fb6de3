import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

_ENV_OVERRIDES = (
    "HASHSTUDY_CONFIG",
    "HASHSTUDY_TABLE_SIZES",
    "HASHSTUDY_DATASET_SIZES",
    "HASHSTUDY_SEEDS",
    "HASHSTUDY_HASH_FUNCTIONS",
    "HASHSTUDY_PROBE_STRATEGIES",
    "HASHSTUDY_OUTPUT_DIR",
    "HASHSTUDY_VERIFY",
)


@pytest.fixture(autouse=True)
def _clean_hashstudy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell overrides from leaking into config-dependent tests."""

    for name in _ENV_OVERRIDES:
        if name in os.environ:
            monkeypatch.delenv(name)
