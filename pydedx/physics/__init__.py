"""
Physics models for pyDEDX.

This subpackage contains the static parameterization and the energy-loss
formulas evaluated by the mass inversion.

Modules
-------

- :mod:`constants`:
  Physical constants, the :data:`~pydedx.physics.constants.SPECIES` lookup table
  and the :class:`~pydedx.physics.constants.EffectiveMedium` mixture rule.

- :mod:`density_effect`:
  Sternheimer density-effect correction per gas component and its mixture.

- :mod:`energy_loss`:
  Bethe-Bloch mean and Landau-Vavilov most probable energy loss, mapped to
  detector response through a :class:`~pydedx.physics.energy_loss.Calibration`.
"""

from .constants import DEFAULT_MEDIUM, SPECIES, EffectiveMedium, GasComponent, ParticleSpecies, get_species
from .density_effect import density_effect, effective_density_effect
from .energy_loss import Calibration, mean_dedx, mpv_dedx, predict_dedx, species_dedx

__all__ = [
    "DEFAULT_MEDIUM",
    "SPECIES",
    "EffectiveMedium",
    "GasComponent",
    "ParticleSpecies",
    "get_species",
    "density_effect",
    "effective_density_effect",
    "Calibration",
    "mean_dedx",
    "mpv_dedx",
    "predict_dedx",
    "species_dedx",
]
