# tuatara_sim/core/machine_io.py
"""
Saving and loading machines and tapes as UTF-8 JSON files.

Loaders never hand back a half-built object: the machine is rebuilt through
its public mutators from a fully parsed document, and any failure along the
way is logged and turned into None.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from .actions import DFSAAction, Direction, TMAction
from .alphabet import Alphabet
from .dfsa_machine import DFSAMachine
from .exceptions import MachineError
from .machine import Machine
from .machine_ir import MachineKind
from .tape import Tape
from .tm_machine import TMMachine
from ..utils.config import (
    FILE_FORMAT_VERSION, MACHINE_FILE_EXTENSION, MACHINE_FILE_FORMAT,
    TAPE_FILE_EXTENSION, TAPE_FILE_FORMAT,
)

logger = logging.getLogger(__name__)

_MACHINE_CLASSES = {
    MachineKind.TM: TMMachine,
    MachineKind.DFSA: DFSAMachine,
}


def machine_to_dict(machine: Machine) -> Dict[str, Any]:
    """Serialise a machine (and any submachines, recursively) to plain data."""
    states = []
    for state in machine.get_states():
        submachine = state.submachine
        states.append({
            "id": state.state_id,
            "label": state.label,
            "start": state.is_start,
            "final": state.is_final,
            "submachine": machine_to_dict(submachine) if submachine is not None else None,
        })

    transitions = []
    for transition in machine.get_transitions():
        action = transition.action
        entry = {
            "from": transition.from_id,
            "to": transition.to_id,
            "input": action.input_symbol,
        }
        if isinstance(action, TMAction):
            entry["direction"] = action.direction.name.lower()
            entry["output"] = action.output_symbol
        transitions.append(entry)

    return {
        "format": MACHINE_FILE_FORMAT,
        "version": FILE_FORMAT_VERSION,
        "kind": machine.kind.value,
        "name": machine.name,
        "alphabet": machine.alphabet.to_string(),
        "states": states,
        "transitions": transitions,
    }


def machine_from_dict(data: Dict[str, Any]) -> Machine:
    """
    Rebuild a machine from `machine_to_dict` output.

    Raises ValueError (or KeyError/TypeError for malformed documents) instead
    of returning a partial machine.
    """
    if data.get("format") != MACHINE_FILE_FORMAT:
        raise ValueError(f"Not a machine document (format={data.get('format')!r}).")
    if data.get("version") != FILE_FORMAT_VERSION:
        raise ValueError(f"Unsupported machine format version {data.get('version')!r}.")

    kind = MachineKind(data["kind"])
    machine = _MACHINE_CLASSES[kind](Alphabet.from_string(data["alphabet"]), name=data.get("name", "Untitled"))

    # File ids are only meaningful inside the file; map them to fresh handles.
    id_map: Dict[int, int] = {}
    for entry in data["states"]:
        state = machine.add_state(str(entry["label"]), bool(entry["start"]), bool(entry["final"]))
        if entry["id"] in id_map:
            raise ValueError(f"Duplicate state id {entry['id']}.")
        id_map[entry["id"]] = state.state_id
        if entry.get("submachine") is not None:
            if kind is not MachineKind.TM:
                raise ValueError("Only Turing machine states can hold submachines.")
            submachine = machine_from_dict(entry["submachine"])
            machine.attach_submachine(state, submachine)

    for entry in data["transitions"]:
        if kind is MachineKind.TM:
            action = TMAction(Direction.from_name(entry["direction"]), entry["input"], entry["output"])
        else:
            action = DFSAAction(entry["input"])
        machine.add_transition(id_map[entry["from"]], id_map[entry["to"]], action)

    return machine


def save_machine(machine: Machine, file_path: str) -> bool:
    if not file_path.endswith(MACHINE_FILE_EXTENSION):
        file_path += MACHINE_FILE_EXTENSION
    try:
        data = machine_to_dict(machine)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        logger.info(f"Machine '{machine.name}' saved to: {file_path}")
        return True
    except (IOError, OSError, TypeError) as e:
        logger.error(f"Error saving machine to '{file_path}': {e}", exc_info=True)
        return False


def load_machine(file_path: str) -> Optional[Machine]:
    if not os.path.exists(file_path):
        logger.error(f"Machine file not found: {file_path}")
        return None
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        machine = machine_from_dict(data)
    except (json.JSONDecodeError, IOError, KeyError, ValueError, TypeError, AttributeError, MachineError) as e:
        logger.error(f"Error loading machine file '{file_path}': {e}", exc_info=True)
        return None
    logger.info(f"Successfully loaded machine '{machine.name}' from: {file_path}")
    return machine


def save_tape(tape: Tape, file_path: str) -> bool:
    if not file_path.endswith(TAPE_FILE_EXTENSION):
        file_path += TAPE_FILE_EXTENSION
    data = {
        "format": TAPE_FILE_FORMAT,
        "version": FILE_FORMAT_VERSION,
        "contents": tape.contents(),
    }
    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        logger.info(f"Tape saved to: {file_path}")
        return True
    except (IOError, OSError) as e:
        logger.error(f"Error saving tape to '{file_path}': {e}", exc_info=True)
        return False


def load_tape(file_path: str, capacity: Optional[int] = None) -> Optional[Tape]:
    if not os.path.exists(file_path):
        logger.error(f"Tape file not found: {file_path}")
        return None
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if data.get("format") != TAPE_FILE_FORMAT or data.get("version") != FILE_FORMAT_VERSION:
            logger.error(f"Invalid tape file '{file_path}': unexpected format header.")
            return None
        contents = data["contents"]
        if not isinstance(contents, str):
            logger.error(f"Invalid tape file '{file_path}': 'contents' is not a string.")
            return None
    except (json.JSONDecodeError, IOError, KeyError, AttributeError) as e:
        logger.error(f"Error loading tape file '{file_path}': {e}", exc_info=True)
        return None
    logger.info(f"Successfully loaded tape from: {file_path}")
    if capacity is None:
        return Tape(contents)
    return Tape(contents, capacity=capacity)
