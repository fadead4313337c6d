# tuatara_sim/managers/execution_manager.py
import logging
from typing import Optional

from PyQt6.QtCore import QObject

from .settings_manager import SettingsManager
from .signal_bus import signal_bus
from ..core.alphabet import Alphabet
from ..core.dfsa_machine import DFSAMachine
from ..core.exceptions import ComputationCompleted, ComputationFailed, MachineError
from ..core.machine import Machine
from ..core.machine_io import load_machine, load_tape, save_machine, save_tape
from ..core.simulator import Simulator, create_simulator
from ..core.tape import Tape
from ..core.tm_machine import TMMachine
from ..utils.config import DEFAULT_ALPHABET_SYMBOLS, DEFAULT_MAX_STEPS, DEFAULT_TAPE_CAPACITY

logger = logging.getLogger(__name__)


class ExecutionManager(QObject):
    """
    Top-level driver that owns the current machine, its input tape and a
    simulator, and reports every outcome through the signal bus.

    This is the one place where machine errors are caught: the core raises,
    the manager logs and publishes. Callers get a plain bool back.
    """

    def __init__(self, settings_manager: Optional[SettingsManager] = None, parent=None):
        super().__init__(parent)
        self.settings_manager = settings_manager
        self.machine: Optional[Machine] = None
        self.simulator: Optional[Simulator] = None
        # The string the tape is restored to on reset().
        self.input_text = ""
        self.tape = Tape(capacity=self._setting("tape_initial_capacity", DEFAULT_TAPE_CAPACITY))
        if self._setting("notify_views_on_tape_change", True):
            self.tape.set_observer(signal_bus.views_refresh_requested.emit)

    def _setting(self, key: str, fallback):
        if self.settings_manager is None:
            return fallback
        return self.settings_manager.get(key, fallback)

    # --- Machine and tape ---

    def new_machine(self, kind: Optional[str] = None) -> Machine:
        """Create and load an empty machine using the configured defaults."""
        kind = kind or self._setting("default_machine_kind", "TM")
        alphabet = Alphabet(self._setting("default_alphabet", DEFAULT_ALPHABET_SYMBOLS))
        machine = DFSAMachine(alphabet) if kind == "DFSA" else TMMachine(alphabet)
        self.load_machine(machine)
        return machine

    def load_machine(self, machine: Machine) -> None:
        self.machine = machine
        self.simulator = create_simulator(machine, self.tape, self)
        self.tape.set_contents(self.input_text)
        logger.info(f"Loaded {machine.kind.value} machine '{machine.name}'.")
        signal_bus.machine_loaded.emit(machine)

    def open_machine_file(self, file_path: str) -> bool:
        machine = load_machine(file_path)
        if machine is None:
            signal_bus.status_message_posted.emit("ERROR", f"Could not open machine file '{file_path}'.")
            return False
        self.load_machine(machine)
        if self.settings_manager is not None:
            self.settings_manager.add_recent_file(file_path)
        return True

    def save_machine_file(self, file_path: str) -> bool:
        if self.machine is None:
            logger.warning("Attempted to save, but no machine is loaded.")
            return False
        return save_machine(self.machine, file_path)

    def set_tape_contents(self, text: str) -> None:
        """Write a new input string and rewind the simulation."""
        self.input_text = text
        self.tape.set_contents(text)
        if self.simulator is not None:
            self.simulator.reset_machine()
        signal_bus.tape_loaded.emit(self.tape.contents())

    def open_tape_file(self, file_path: str) -> bool:
        tape = load_tape(file_path)
        if tape is None:
            signal_bus.status_message_posted.emit("ERROR", f"Could not open tape file '{file_path}'.")
            return False
        self.set_tape_contents(tape.contents())
        return True

    def save_tape_file(self, file_path: str) -> bool:
        return save_tape(self.tape, file_path)

    # --- Execution ---

    def step(self) -> bool:
        """
        Take a single step. Returns True while the computation can continue;
        False once it has halted or an error stopped it.
        """
        if self.simulator is None:
            logger.warning("Step requested, but no machine is loaded.")
            return False
        if self.simulator.current_step == 0:
            signal_bus.simulation_started.emit(self.simulator)
        try:
            self.simulator.step()
        except (ComputationCompleted, ComputationFailed) as e:
            self._publish_halt(isinstance(e, ComputationCompleted) and self.simulator.is_accepted(), str(e))
            return False
        except MachineError as e:
            self._publish_error(e)
            return False

        signal_bus.configuration_changed.emit(self.simulator.get_configuration())
        if self.simulator.is_halted():
            self._publish_halt(self.simulator.is_accepted(), self._halt_message())
            return False
        return True

    def run(self, max_steps: Optional[int] = None) -> bool:
        """Run to halt within the step budget. Returns whether the input was accepted."""
        if self.simulator is None:
            logger.warning("Run requested, but no machine is loaded.")
            return False
        if max_steps is None:
            max_steps = self._setting("execution_max_steps", DEFAULT_MAX_STEPS)
        signal_bus.simulation_started.emit(self.simulator)
        try:
            accepted = self.simulator.run_until_halt(max_steps)
        except MachineError as e:
            self._publish_error(e)
            return False

        signal_bus.configuration_changed.emit(self.simulator.get_configuration())
        if self.simulator.budget_exhausted:
            message = f"Stopped after {max_steps} step(s) without halting."
            logger.warning(message)
            signal_bus.status_message_posted.emit("WARNING", message)
        else:
            self._publish_halt(accepted, self._halt_message())
        return accepted

    def reset(self) -> None:
        """Restore the input tape and clear the simulator's cursor."""
        self.tape.set_contents(self.input_text)
        if self.simulator is not None:
            self.simulator.reset_machine()
        signal_bus.simulation_reset.emit()

    def _halt_message(self) -> str:
        state = self.simulator.get_current_state_name()
        if isinstance(self.machine, TMMachine):
            if self.tape.is_parked():
                return f"Halted in {state} with the r/w head parked."
            return f"Halted in {state}, but the r/w head was not parked."
        if self.simulator.is_accepted():
            return "The input string was accepted."
        return "The input string was not accepted."

    def _publish_halt(self, accepted: bool, message: str) -> None:
        logger.info(f"Computation halted (accepted={accepted}): {message}")
        signal_bus.simulation_halted.emit(accepted, message)

    def _publish_error(self, error: MachineError) -> None:
        logger.error(f"{type(error).__name__}: {error}")
        signal_bus.simulation_error.emit(str(error))
