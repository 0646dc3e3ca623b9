"""Pytest bootstrap helpers shared by all test domains."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _append_repo_root() -> None:
    """Ensure repository root is present in import path."""
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_text = str(repo_root)
    if repo_root_text in sys.path:
        return
    sys.path.insert(0, repo_root_text)


_append_repo_root()


@pytest.fixture
def tomato_crop():
    """Crop record with a handful of concrete values and id ``1``."""
    from src.core import CROP, CropProperty

    crop = CROP.new_record()
    crop.set_id(1)
    crop.set(CropProperty.CROP_NAME, "Tomato")
    crop.set(CropProperty.MATURITY, 60)
    crop.set(CropProperty.TRANSPLANT, True)
    crop.set(CropProperty.YIELD_P_FOOT, 0.5)
    return crop
