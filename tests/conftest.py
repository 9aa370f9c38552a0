import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from sockrepl.core.eval.context import EvaluationContext
from sockrepl.core.eval.interpreter import CommandInterpreter
from sockrepl.infra.json_serializer import JsonSerializer


@pytest.fixture
def serializer():
    return JsonSerializer()


@pytest.fixture
def context():
    return EvaluationContext()


@pytest.fixture
def interpreter(context, serializer):
    return CommandInterpreter(context, serializer)


@pytest.fixture
def socket_path() -> Generator[Path, None, None]:
    # AF_UNIX paths are limited to ~100 bytes, pytest's tmp_path can be longer.
    base = Path(tempfile.mkdtemp(prefix="sockrepl-"))
    try:
        yield base / "repl.sock"
    finally:
        shutil.rmtree(base, ignore_errors=True)
