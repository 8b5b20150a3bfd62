"""
Mass inversion from rigidity and energy loss.

This subpackage finds the rest mass m for which the predicted detector response
of a particle with charge z and rigidity R equals the measured one.

The typical workflow includes:
- configuration of the energy-loss model, mass bracket and solver settings
- single-measurement inversion with :meth:`MassFinder.solve`
- every candidate mass of an ambiguous measurement with :meth:`MassFinder.find_roots`
- batch inversion into a DataFrame with :meth:`MassFinder.estimate`

Modules
-------

- :mod:`core`:
  Defines :class:`~pydedx.massfinder.core.MassFinderParameters`,
  :class:`~pydedx.massfinder.core.MassFinder` and :func:`~pydedx.massfinder.core.solve_mass`.

- :mod:`compute`:
  Implements :meth:`~pydedx.massfinder.core.MassFinder.estimate` and
  :meth:`~pydedx.massfinder.core.MassFinder.expected_curves`.

- :mod:`errors`:
  The :class:`~pydedx.massfinder.errors.MassInversionError` hierarchy.

Usage
-----

.. code-block:: python

    from pydedx.massfinder import MassFinder, MassFinderParameters
    from pydedx.physics import Calibration

    finder = MassFinder(MassFinderParameters(model_name="Landau-Vavilov"))
    calib = Calibration(normalization=1.0, offset=0.0, thickness=1.0)
    m = finder.solve(z=1, rigidity=800.0, measured=0.0031, calibration=calib)
    df = finder.estimate(rigidity=[800.0, 900.0], dedx=[0.0031, 0.0029], calibration=calib)
"""

from .core import MassFinder, MassFinderParameters, solve_mass
from .errors import MassInversionError, NoSignChangeError, NonPhysicalInputError, SolverNonConvergenceError
from . import compute  # noqa

__all__ = [
    "MassFinder",
    "MassFinderParameters",
    "solve_mass",
    "MassInversionError",
    "NoSignChangeError",
    "NonPhysicalInputError",
    "SolverNonConvergenceError",
]
