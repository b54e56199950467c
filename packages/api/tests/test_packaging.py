# This project was developed with assistance from AI tools.
"""Layer directories under ``src`` are namespace packages."""

import importlib

import pytest


@pytest.mark.parametrize("name", ["src.core", "src.middleware", "src.routes", "src.services"])
def test_layer_directory_is_namespace_package(name):
    module = importlib.import_module(name)
    assert getattr(module, "__file__", None) is None
