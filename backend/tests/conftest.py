import sys
from pathlib import Path

import pytest

# Make the backend modules importable when pytest runs from the repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture
def fonts():
    """Pillow's built-in face for every role, independent of CARD_*_FONT_PATH."""
    from services.text_layout import FontSet

    return FontSet()


@pytest.fixture
def og_variant():
    from services.layout_engine import OG_PREVIEW, get_variant

    return get_variant(OG_PREVIEW)
