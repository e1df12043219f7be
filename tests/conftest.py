import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path so fanout imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

FANOUT_ENV_VARS = ("FANOUT_CONFIG", "FANOUT_ISOLATE_ERRORS", "FANOUT_MAX_LISTENERS", "FANOUT_ERROR_EVENT")


@pytest.fixture(autouse=True)
def _clean_fanout_env(monkeypatch: pytest.MonkeyPatch):
    for key in FANOUT_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
