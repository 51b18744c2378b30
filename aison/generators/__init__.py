from __future__ import annotations

# Import generators to populate registry on module load
from . import text, image  # noqa: F401
