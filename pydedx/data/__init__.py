# This file marks this directory as a Python package
"""
Data resources for pyDEDX.

This subpackage bundles the static physical parameters used by the
energy-loss models.

Contents
--------

- ``species.json``:
  Lookup table mapping particle species names to their symbol, charge
  number and rest mass. Masses are given either in MeV (``mass``) or in
  atomic mass units (``mass_amu``).

- ``gases.json``:
  Gas components (atomic number, atomic mass, mean excitation energy in eV
  and Sternheimer density-effect parameters) and named mixtures of them
  (mole fractions and density in g/cm³). Mean excitation energies are taken
  from Atomic Data and Nuclear Data Tables 30, 261 (1984).
"""
