import base64
import io

import pytest
from PIL import Image

from insight_engine.core.schemas import Dataset


@pytest.fixture
def png_base64():
    """A small chart-sized PNG as bare base64."""
    buffer = io.BytesIO()
    Image.new("RGB", (320, 200), color=(59, 130, 246)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def monthly_sales():
    rows = [
        {"Month": f"2024-{m:02d}-01", "Region": ["North", "South"][m % 2], "Sales": 100 * m, "Units": 7 * m + (m % 3)}
        for m in range(1, 13)
    ]
    return Dataset(fields=["Month", "Region", "Sales", "Units"], rows=rows)
