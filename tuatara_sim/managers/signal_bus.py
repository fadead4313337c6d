# tuatara_sim/managers/signal_bus.py
from PyQt6.QtCore import QObject, pyqtSignal


# A central place for all cross-component signals
class SignalBus(QObject):
    """
    A global singleton object for application-wide, decoupled communication.

    The interpreter core never depends on anything connected here. Views
    subscribe to these signals to stay in sync with the execution manager
    and the tape without holding a reference to either.
    """

    # --- Views ---
    # Emitted after every tape mutation when the tape observer is attached.
    views_refresh_requested = pyqtSignal()
    status_message_posted = pyqtSignal(str, str)  # level, message

    # --- Machine ---
    machine_loaded = pyqtSignal(object)  # Machine instance
    tape_loaded = pyqtSignal(str)  # tape contents

    # --- Simulation ---
    simulation_started = pyqtSignal(object)  # Simulator instance
    simulation_halted = pyqtSignal(bool, str)  # accepted, message
    simulation_error = pyqtSignal(str)  # message
    simulation_reset = pyqtSignal()
    configuration_changed = pyqtSignal(str)  # instantaneous description

    def __init__(self):
        super().__init__()


# Create a singleton instance for global access throughout the application
signal_bus = SignalBus()
