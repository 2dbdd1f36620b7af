import sys
import threading
from pathlib import Path

# Ensure the application package under server/ is importable when running tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SERVER_PATH = PROJECT_ROOT / 'server'
if str(SERVER_PATH) not in sys.path:
    sys.path.insert(0, str(SERVER_PATH))

import pytest

from stacksprint.core.config_store import ConfigStore
from stacksprint.core.generation_client import GenerationError
from stacksprint.models import GenerationResult


def make_result(paths, bash="#!/usr/bin/env bash\necho ok\n", powershell="Write-Host ok"):
    return GenerationResult(bash_script=bash, powershell_script=powershell, file_paths=list(paths))


class FakeGenerationClient:
    """Stands in for GenerationClient; records payloads and can hold calls open."""

    def __init__(self):
        self.calls = []
        self.gates = {}
        self.failures = {}
        self._lock = threading.Lock()

    def generate(self, payload):
        with self._lock:
            self.calls.append(payload)
        key = payload.root.name
        gate = self.gates.get(key)
        if gate is not None:
            gate.wait(5)
        if key in self.failures:
            raise GenerationError(self.failures[key], status_code=400)
        return make_result([f"{key}/", f"{key}/main.go"], bash=f"# {key}\n")


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def fake_client():
    return FakeGenerationClient()
