"""
Import smoke tests.

Every module must import cleanly, since module-level constants such as
DEFAULT_INPUTS and RATE_TABLE are built at import time.
"""

import importlib

import pytest


MODULES = [
    "flowstate.core.inputs",
    "flowstate.core.rates",
    "flowstate.core.footprint",
    "flowstate.core.window",
    "flowstate.core.streak",
    "flowstate.core.submission",
    "flowstate.core.summary",
    "flowstate.storage.db",
    "flowstate.storage.models",
    "flowstate.storage.repository",
    "flowstate.config.loader",
    "flowstate.sdk.assistant",
    "flowstate.demo.seed_demo_data",
    "flowstate.cli.main",
]


@pytest.mark.parametrize("module_name", MODULES)
def test_module_imports(module_name):
    assert importlib.import_module(module_name) is not None


def test_default_inputs_built_at_import():
    from flowstate.core.inputs import DEFAULT_INPUTS
    assert DEFAULT_INPUTS.baths == 1
    assert DEFAULT_INPUTS.meat_meals == 7


def test_cli_app_available():
    from flowstate.cli.main import app
    from flowstate.sdk import WaterAssistant
    assert app is not None
    assert WaterAssistant is not None
