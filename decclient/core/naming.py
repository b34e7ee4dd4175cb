from __future__ import annotations

import uuid
from pathlib import Path


def make_temp_name(file_name: str | Path) -> str:
    """Return a fresh remote name of the form ``<base>_<uuid4><ext>``."""

    name = Path(file_name).name
    path = Path(name)
    return f"{path.stem}_{uuid.uuid4()}{path.suffix}"
