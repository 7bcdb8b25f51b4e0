"""Shared fixtures: fresh registries and context keys per test."""

from types import SimpleNamespace

import pytest

import ctxwire
from ctxwire import runtime_config


@pytest.fixture(autouse=True)
def isolated_config():
    runtime_config.reset()
    yield
    runtime_config.reset()


@pytest.fixture
def registry():
    """A fresh process-wide registry, restored after the test."""
    fresh = ctxwire.PropagatorRegistry()
    previous = ctxwire.set_registry(fresh)
    yield fresh
    ctxwire.set_registry(previous)


@pytest.fixture
def keys():
    return SimpleNamespace(
        text=ctxwire.create_key("str"),
        number=ctxwire.create_key("int"),
        log=ctxwire.create_key("log"),
        user=ctxwire.create_key("user"),
    )
