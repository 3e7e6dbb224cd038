"""Pytest configuration and shared fixtures for the mdmermaid test suite."""

from pathlib import Path

import pytest
from utils import SAMPLE_DOCUMENT, FakeEngine


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for documents and rendered files."""
    return tmp_path


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Provide a fresh recording engine."""
    return FakeEngine()


@pytest.fixture
def sample_document() -> str:
    """Provide a document with one complete diagram block."""
    return SAMPLE_DOCUMENT
