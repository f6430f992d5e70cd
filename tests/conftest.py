"""
Pytest configuration and shared fixtures for Casus tests.
"""

import os
import sys
from pathlib import Path

# Run Qt headless when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add parent directory to path so we can import casus modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from PyQt5.QtWidgets import QApplication

from casus.config_manager import ConfigManager
from casus.core.block import Block
from casus.core.connection_kind import ConnectionKind
from casus.core.workspace import Workspace


class ManualTimer:
    """Stands in for QTimer.singleShot; tasks run only when the test says so."""

    def __init__(self):
        self.tasks = []

    def __call__(self, delay_ms, task):
        self.tasks.append((delay_ms, task))

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for _, task in tasks:
            task()


# Need a QApplication instance for PyQt tests
@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests that need Qt."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def config(tmp_path):
    """Configuration backed by a throwaway file (defaults, LTR)."""
    return ConfigManager(str(tmp_path / "config.json"))


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def workspace(qapp, config, timer):
    """Create a Workspace whose bumps wait for timer.run_all()."""
    return Workspace(config=config, timer=timer)


@pytest.fixture
def value_block(workspace):
    """
    Factory for value blocks: an output at (x, y) and value inputs stacked
    to its right, 25 units apart.
    """
    def make(x=0, y=0, inputs=1, output=True, check=None, input_check=None,
             kind=ConnectionKind.INPUT_VALUE, movable=True, rendered=True, ws=None):
        block = Block(ws or workspace, 'value', part_of_speech='noun',
                      movable=movable, rendered=rendered)
        if output:
            block.set_output(kind.opposite, check).move_to(x, y)
        for i in range(inputs):
            row = block.append_input(f"IN{i}", kind, input_check)
            row.connection.move_to(x + 40, y + 25 * i)
        block.xy.setX(x)
        block.xy.setY(y)
        return block
    return make


@pytest.fixture
def statement_block(workspace):
    """Factory for statement blocks: previous at (x, y), next at (x, y + 30)."""
    def make(x=0, y=0, previous=True, next_=True, previous_check=None, next_check=None,
             movable=True, rendered=True):
        block = Block(workspace, 'statement', movable=movable, rendered=rendered)
        if previous:
            block.set_previous_statement(previous_check).move_to(x, y)
        if next_:
            block.set_next_statement(next_check).move_to(x, y + 30)
        block.xy.setX(x)
        block.xy.setY(y)
        return block
    return make
