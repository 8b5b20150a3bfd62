"""
pyDEDX: particle mass estimation from rigidity and ionization energy loss.

pyDEDX inverts an energy-loss model to find the rest mass of a charged particle
whose rigidity and energy loss in a gas detector have been measured.
It supports:

- Bethe-Bloch mean dE/dx and Landau-Vavilov most probable dE/dx
- Sternheimer density-effect correction for gas mixtures (P10 by default)
- Affine calibration from physical energy loss to detector response units
- Bracketed root search over mass with explicit failure reporting
- Batch estimation into pandas DataFrames and per-species expected curves

Main subpackages
----------------

- :mod:`pydedx.io`: Loading of the bundled parameter files.
- :mod:`pydedx.data`: Particle species and gas mixture definitions.
- :mod:`pydedx.physics`: Constants, density effect and energy-loss formulas.
- :mod:`pydedx.massfinder`: Mass inversion, batch estimation and error types.
- :mod:`pydedx.utils`: Thread-pool sizing.
"""

from .physics import Calibration, EffectiveMedium, get_species, mean_dedx, mpv_dedx
from .massfinder import (
    MassFinder,
    MassFinderParameters,
    MassInversionError,
    NoSignChangeError,
    NonPhysicalInputError,
    SolverNonConvergenceError,
    solve_mass,
)

__all__ = [
    "Calibration",
    "EffectiveMedium",
    "get_species",
    "mean_dedx",
    "mpv_dedx",
    "MassFinder",
    "MassFinderParameters",
    "MassInversionError",
    "NoSignChangeError",
    "NonPhysicalInputError",
    "SolverNonConvergenceError",
    "solve_mass",
    ]
