from __future__ import annotations

import io
import os
import time
from pathlib import Path
from typing import Callable, Optional

import pytest
from rich.console import Console

from console_ui import ConsoleUI

DAY = 86400


class ScriptedUI(ConsoleUI):
    """ConsoleUI writing to a buffer, with canned answers for the prompts"""

    def __init__(self, pick: Optional[Callable[[list[str]], list[int]]] = None, answer: bool = False):
        self.buffer = io.StringIO()
        super().__init__(console=Console(file=self.buffer, width=1000, highlight=False, color_system=None))
        self.pick = pick
        self.answer = answer
        self.select_calls: list[list[str]] = []
        self.confirm_calls: list[str] = []

    def select_indices(self, items: list[str], title: str = "Select items") -> list[int]:
        self.select_calls.append(list(items))
        return self.pick(items) if self.pick else []

    def confirm(self, question: str) -> bool:
        self.confirm_calls.append(question)
        return self.answer

    @property
    def output(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def scripted_ui() -> Callable[..., ScriptedUI]:
    return ScriptedUI


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Create a file of the given size, last accessed `age` days ago"""

    def _make(path: Path, size: int = 0, age: float = 0.0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        stamp = time.time() - age * DAY
        os.utime(path, (stamp, stamp))
        return path

    return _make
