import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

import capguard.templates as templates


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Drop cached templates and any template settings from the environment."""
    for var in (
        templates.CONFIG_ENV,
        templates.USER_TEMPLATE_ENV,
        templates.GROUP_TEMPLATE_ENV,
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(templates, "_config", None)
