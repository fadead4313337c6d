# tests/conftest.py
import sys
import os
import pytest

# Qt needs a platform plugin even for non-GUI objects; run headless.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Path to the project root: .../package (the directory that contains 'tuatara_sim')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Add the project root to sys.path so 'import tuatara_sim' works from a checkout
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from PyQt6.QtWidgets import QApplication  # noqa: E402

from tuatara_sim.core.actions import Direction, TMAction, DFSAAction, OTHERWISE_SYMBOL  # noqa: E402
from tuatara_sim.core.dfsa_machine import DFSAMachine  # noqa: E402
from tuatara_sim.core.tm_machine import TMMachine  # noqa: E402


_QAPP = None


@pytest.fixture(scope="session")
def qapp_args():
    """Creates the shared QApplication up front; pytest-qt reuses the existing instance."""
    global _QAPP
    # Keep a reference so the application is not garbage-collected.
    _QAPP = QApplication.instance() or QApplication([])
    return []


@pytest.fixture(autouse=True)
def _app(qapp_args):
    return QApplication.instance()


@pytest.fixture
def scan_machine():
    """q0 -(1/→)-> q0, q0 -(?/→)-> q1 with q1 final."""
    machine = TMMachine(name="scan")
    q0 = machine.add_state("q0", is_start=True)
    q1 = machine.add_state("q1", is_final=True)
    machine.add_transition(q0, q0, TMAction.move(Direction.RIGHT, "1"))
    machine.add_transition(q0, q1, TMAction.move(Direction.RIGHT, OTHERWISE_SYMBOL))
    return machine


@pytest.fixture
def binary_dfsa():
    """Single start-and-final state with self loops on 0 and 1."""
    machine = DFSAMachine(name="binary")
    q0 = machine.add_state("q0", is_start=True, is_final=True)
    machine.add_transition(q0, q0, DFSAAction("0"))
    machine.add_transition(q0, q0, DFSAAction("1"))
    return machine
