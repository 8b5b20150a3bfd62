"""
Discovery and loading of bundled parameter files.

This module provides functions to:

- Locate the JSON resources shipped in :mod:`pydedx.data`
- List the available resources
- Load the particle species table (`species.json`)
- Load the gas component and mixture table (`gases.json`)

All file paths are resolved using :mod:`importlib.resources`, making them portable
within installed packages or local development environments.
"""

import os
import json
import importlib.util
from typing import List, Dict
from pathlib import Path


def get_data_path(filename: str) -> str:
    """
    Locate a bundled data file by name.

    Tries first to resolve the file within the installed package.
    Falls back to a local relative path (for development use) if needed.

    :param filename: The name of the file to locate (e.g. "species.json").
    :type filename: str

    :returns: Absolute path to the located file.
    :rtype: str

    :raises FileNotFoundError: If the file cannot be found in either location.
    """
    spec = importlib.util.find_spec("pydedx.data")
    if spec is not None and spec.origin is not None:
        full_path = os.path.join(os.path.dirname(spec.origin), filename)
        if os.path.exists(full_path):
            return full_path

    # Local fallback (e.g. during development)
    local = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "data", filename)
    )
    if os.path.exists(local):
        return local

    raise FileNotFoundError(f"Cannot find data file '{filename}'")


def list_available_resources() -> List[str]:
    """
    List all JSON resources bundled in :mod:`pydedx.data`.

    :returns: Sorted list of resource filenames.
    :rtype: list[str]
    """
    spec = importlib.util.find_spec("pydedx.data")
    if spec is None or spec.origin is None:
        raise FileNotFoundError("Could not locate the pydedx.data package.")
    folder_path = Path(spec.origin).parent
    return sorted(f.name for f in folder_path.iterdir() if f.suffix == ".json")


def _load_json(filename: str) -> Dict:
    with open(get_data_path(filename), "r", encoding="utf-8") as f:
        return json.load(f)


def load_species_table() -> Dict[str, Dict]:
    """
    Load the particle species lookup table.

    :returns: Dictionary mapping species names to their symbol, charge and mass entry.
    :rtype: dict[str, dict]

    :raises FileNotFoundError: If species.json cannot be found.
    :raises json.JSONDecodeError: If the file content is not valid JSON.
    """
    return _load_json("species.json")


def load_gas_table() -> Dict[str, Dict]:
    """
    Load the gas component and mixture definitions.

    The returned dictionary has two keys: ``"components"`` (per-gas atomic and
    density-effect parameters) and ``"mixtures"`` (named mole-fraction mixtures
    with their density).

    :returns: Gas definitions.
    :rtype: dict[str, dict]

    :raises FileNotFoundError: If gases.json cannot be found.
    :raises KeyError: If one of the two top-level sections is missing.
    """
    table = _load_json("gases.json")
    for section in ("components", "mixtures"):
        if section not in table:
            raise KeyError(f"Missing section '{section}' in gases.json")
    return table
