"""
I/O submodule for pyDEDX.

This package locates and loads the static parameter files bundled with pyDEDX.

Modules
-------

- :mod:`data_registry`:
  Functions for discovering and loading the species table and the gas
  definitions. See :func:`~pydedx.io.data_registry.load_species_table` and
  :func:`~pydedx.io.data_registry.load_gas_table`.
"""

from .data_registry import get_data_path, load_gas_table, load_species_table

__all__ = ["get_data_path", "load_gas_table", "load_species_table"]
