"""Pytest configuration.

The package lives at the repository root (``mailhog_decoder/``) and the
shared message fixtures live in ``tests/mail_fixtures.py``. Depending on how
pytest is invoked, the repository root may not be on ``sys.path``, so it is
added explicitly during test collection.
"""

import sys
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
