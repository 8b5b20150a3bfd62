"""
Core classes for mass inversion from rigidity and energy loss.

This module defines:
- :class:`MassFinderParameters`: configuration container for the model choice, the mass bracket and the solver settings
- :class:`MassFinder`: main interface solving predicted(z, m, R) = measured for the mass m
- :func:`solve_mass`: one-call functional form of :meth:`MassFinder.solve`

The residual r(m) = measured − predicted(m) is not monotonic in mass: at fixed
rigidity a light particle sits on the relativistic rise and a heavy one on the
1/β² branch, and both can reproduce the same measurement. The residual is
therefore sampled on a grid across the bracket to find every sub-interval
holding a sign change, and Brent's method (:func:`scipy.optimize.brentq`)
refines them. :meth:`MassFinder.find_roots` returns all roots;
:meth:`MassFinder.solve` returns the one picked by ``root_selection``.
Every solve builds its own grid and residual closure, and a MassFinder holds
only dataclasses, so it can be shared between threads or pickled to worker
processes.
"""

from dataclasses import dataclass, asdict, replace
from typing import List, Optional, Sequence, Tuple, Union
import logging
import numpy as np
from scipy.optimize import brentq
from tabulate import tabulate

from pydedx.physics.constants import EffectiveMedium, resolve_medium
from pydedx.physics.energy_loss import (
    LANDAU_VAVILOV,
    Calibration,
    kinematics,
    normalize_model_name,
    predict_dedx,
)
from .errors import NoSignChangeError, NonPhysicalInputError, SolverNonConvergenceError

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)

CalibrationLike = Union[Calibration, Sequence[float], None]
ROOT_SELECTIONS = ("heaviest", "lightest")


@dataclass
class MassFinderParameters:
    """
    Configuration container for MassFinder.

    :ivar model_name: Energy-loss model: 'Bethe-Bloch' or 'Landau-Vavilov' (aliases 'BB', 'LV').
    :ivar mass_min: Lower edge of the mass search bracket (MeV).
    :ivar mass_max: Upper edge of the mass search bracket (MeV).
    :ivar scan_points: Number of grid points used to locate sign changes in the bracket.
    :ivar log_scan: If True, the scan grid is log-spaced, otherwise linear.
    :ivar xtol: Absolute tolerance of the root finder (MeV).
    :ivar rtol: Relative tolerance of the root finder.
    :ivar maxiter: Maximum number of root-finder iterations.
    :ivar medium: Name of the gas mixture in the bundled registry.
    :ivar root_selection: Root returned by :meth:`MassFinder.solve` when several masses
        reproduce the measurement: 'heaviest' (1/β² branch) or 'lightest' (relativistic rise).
    """

    @classmethod
    def from_dict(cls, config: dict) -> "MassFinderParameters":
        """
        Create a MassFinderParameters instance from a dictionary.

        :param config: Dictionary of configuration fields.
        :type config: dict

        :returns: Populated MassFinderParameters instance.
        :rtype: MassFinderParameters

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        valid_keys = set(cls.__dataclass_fields__.keys())
        extra_keys = set(config.keys()) - valid_keys

        if extra_keys:
            raise ValueError(
                f"Unrecognized keys in MassFinderParameters config: {sorted(extra_keys)}"
            )

        return cls(**config)

    model_name: str = "Bethe-Bloch"
    mass_min: float = 0.1
    mass_max: float = 10000.0

    scan_points: int = 100
    log_scan: bool = True

    # --- brentq defaults ---
    xtol: float = 2e-12
    rtol: float = 4 * np.finfo(float).eps
    maxiter: int = 100

    medium: str = "P10"
    root_selection: str = "heaviest"


class MassFinder:
    """
    Mass estimator inverting an energy-loss model at fixed rigidity.
    """

    def __repr__(self):
        return (f"<MassFinder model={self.model_name}, medium={self.medium.name}, "
                f"bracket=[{self.params.mass_min}, {self.params.mass_max}]>")

    def __init__(self, parameters: Optional[MassFinderParameters] = None,
                 medium: Optional[EffectiveMedium] = None):
        """
        Initialize a MassFinder.

        :param parameters: Model and solver settings. Defaults to MassFinderParameters().
        :type parameters: Optional[MassFinderParameters]
        :param medium: Absorber medium. If None, the mixture named in the parameters is loaded.
        :type medium: Optional[EffectiveMedium]

        :raises ValueError: If the parameters are invalid.
        """
        self.params = parameters or MassFinderParameters()
        self._validate_parameters()
        self.medium = medium or resolve_medium(self.params.medium)

    def _validate_parameters(self):
        """
        Check the consistency of MassFinderParameters.

        :raises ValueError: If the model is unknown, the bracket is empty or
            non-positive, or a solver setting is out of range.
        """
        p = self.params
        self._model_name = normalize_model_name(p.model_name)

        if not p.mass_min > 0:
            raise ValueError("mass_min must be positive.")
        if not p.mass_max > p.mass_min:
            raise ValueError(f"mass_max ({p.mass_max}) must be greater than mass_min ({p.mass_min}).")
        if p.scan_points < 2:
            raise ValueError("scan_points must be at least 2.")
        if p.xtol <= 0:
            raise ValueError("xtol must be positive.")
        if p.rtol < 4 * np.finfo(float).eps:
            raise ValueError("rtol must be at least 4 times the machine epsilon.")
        if p.maxiter < 1:
            raise ValueError("maxiter must be at least 1.")
        if p.root_selection not in ROOT_SELECTIONS:
            raise ValueError(
                f"Invalid root_selection '{p.root_selection}'. Choose one of: {list(ROOT_SELECTIONS)}"
            )

    @property
    def model_name(self) -> str:
        """
        Canonical name of the active energy-loss model.

        :rtype: str
        """
        return self._model_name

    def summary(self, verbose: bool = False):
        """
        Print the medium and solver configuration.

        :param verbose: If True, also list the gas components of the medium.
        :type verbose: bool, optional
        """
        p = asdict(self.params)
        med = self.medium

        medium_parameters = [
            ("Mixture", med.name),
            ("ρ [g/cm³]", med.density),
            ("Z_eff", med.atomic_number),
            ("A_eff [g/mol]", med.atomic_mass),
            ("I_eff [eV]", med.mean_excitation * 1e6),
        ]
        solver_parameters = [
            ("Mass bracket [MeV]", f"[{p['mass_min']}, {p['mass_max']}]"),
            ("Scan points", f"{p['scan_points']} ({'log' if p['log_scan'] else 'linear'})"),
            ("xtol [MeV]", p["xtol"]),
            ("rtol", p["rtol"]),
            ("Max iterations", p["maxiter"]),
            ("Root selection", p["root_selection"]),
        ]

        print("\nMassFinder Configuration")
        print(f"\nEnergy-loss model: {self.model_name}")
        print(tabulate(medium_parameters, headers=["Medium", "Value"], tablefmt="fancy_grid"))
        print(tabulate(solver_parameters, headers=["Solver", "Value"], tablefmt="fancy_grid"))

        if verbose:
            components = [
                (c.name, w, c.atomic_number, c.atomic_mass, c.mean_excitation * 1e6)
                for w, c in zip(med.weights, med.components)
            ]
            print(tabulate(components, headers=["Gas", "Fraction", "Z", "A [g/mol]", "I [eV]"],
                           tablefmt="grid"))

    def _resolve_calibration(self, calibration: CalibrationLike) -> Calibration:
        """
        Normalize the calibration argument and check it fits the active model.

        :raises NonPhysicalInputError: If the Landau-Vavilov model has no positive thickness.
        """
        if calibration is None:
            calib = Calibration()
        elif isinstance(calibration, Calibration):
            calib = calibration
        else:
            calib = Calibration.from_sequence(calibration)

        if self.model_name == LANDAU_VAVILOV and (calib.thickness is None or not calib.thickness > 0):
            raise NonPhysicalInputError(
                "Landau-Vavilov inversion requires a calibration with a positive detector thickness."
            )
        return calib

    def predict(self, z, mass, rigidity, calibration: CalibrationLike = None):
        """
        Predicted detector response for the active model and medium.

        :param z: Charge number.
        :param mass: Rest mass [MeV], scalar or array.
        :param rigidity: Rigidity [MeV/c per unit charge].
        :param calibration: Response calibration.

        :returns: Predicted response.
        :rtype: float or np.ndarray
        """
        calib = self._resolve_calibration(calibration)
        return predict_dedx(self.model_name, z, mass, rigidity, calib, self.medium)

    def residual(self, mass, z: float, rigidity: float, measured: float,
                 calibration: CalibrationLike = None):
        """
        Residual r(m) = measured − predicted(z, m, rigidity).

        :returns: Residual at each mass.
        :rtype: float or np.ndarray
        """
        return measured - self.predict(z, mass, rigidity, calibration)

    def scan_grid(self) -> np.ndarray:
        """
        Mass grid used to locate sign changes of the residual.

        :rtype: np.ndarray
        """
        p = self.params
        if p.log_scan:
            return np.geomspace(p.mass_min, p.mass_max, p.scan_points)
        return np.linspace(p.mass_min, p.mass_max, p.scan_points)

    def _root_brackets(self, z: float, rigidity: float, measured: float,
                       calib: Calibration) -> List[Tuple[float, float]]:
        """
        Scan the residual over the mass bracket and return the sub-brackets holding a root.

        Sub-brackets are sorted by mass. A pair with lo == hi is a grid point
        where the residual is exactly zero.

        :raises NonPhysicalInputError: If the inputs are not finite or β² leaves (0, 1).
        :raises NoSignChangeError: If the residual keeps its sign over the whole grid.
        """
        if not np.all(np.isfinite([z, rigidity, measured])):
            raise NonPhysicalInputError(
                f"Non-finite input: z={z}, rigidity={rigidity}, measured={measured}."
            )

        p = self.params
        grid = self.scan_grid()
        b2, _ = kinematics(z, grid, rigidity)
        if not np.all((b2 > 0) & (b2 < 1)):
            raise NonPhysicalInputError(
                f"beta^2 leaves (0, 1) in the mass bracket [{p.mass_min}, {p.mass_max}] "
                f"for z={z}, rigidity={rigidity}."
            )

        with np.errstate(all="ignore"):
            values = self.residual(grid, z, rigidity, measured, calib)
        if not np.all(np.isfinite(values)):
            raise NonPhysicalInputError(
                f"Residual is not finite in the mass bracket for z={z}, rigidity={rigidity}."
            )

        signs = np.sign(values)
        brackets = [(grid[i], grid[i + 1]) for i in np.nonzero(signs[:-1] * signs[1:] < 0)[0]]
        brackets += [(m, m) for m in grid[signs == 0]]
        if not brackets:
            raise NoSignChangeError(
                f"Measured response {measured} is outside the range predicted for masses in "
                f"[{p.mass_min}, {p.mass_max}] MeV (z={z}, rigidity={rigidity})."
            )
        return sorted(brackets)

    def _refine(self, bracket: Tuple[float, float], z: float, rigidity: float,
                measured: float, calib: Calibration) -> float:
        """
        Refine one sub-bracket with Brent's method.

        :raises SolverNonConvergenceError: If brentq does not converge within maxiter.
        """
        lo, hi = bracket
        if lo == hi:
            return float(lo)
        logger.debug(f"Solving in sub-bracket [{lo:.6g}, {hi:.6g}] MeV")

        def f(m):
            return self.residual(m, z, rigidity, measured, calib)

        p = self.params
        root, result = brentq(f, lo, hi, xtol=p.xtol, rtol=p.rtol, maxiter=p.maxiter,
                              full_output=True, disp=False)
        if not result.converged:
            raise SolverNonConvergenceError(
                f"Root finder did not converge after {result.iterations} iterations "
                f"in [{lo:.6g}, {hi:.6g}] MeV ({result.flag})."
            )
        logger.debug(f"Converged to m={root:.8g} MeV in {result.iterations} iterations")
        return float(root)

    def find_roots(self, z: float, rigidity: float, measured: float,
                   calibration: CalibrationLike = None) -> np.ndarray:
        """
        Find every mass in the bracket whose predicted response equals the measurement.

        A light particle on the relativistic rise and a heavier one on the
        1/β² branch can produce the same response, so more than one root is common.

        :param z: Charge number.
        :param rigidity: Rigidity [MeV/c per unit charge].
        :param measured: Measured detector response.
        :param calibration: Response calibration (thickness required for Landau-Vavilov).

        :returns: Roots in ascending mass order [MeV].
        :rtype: np.ndarray

        :raises NonPhysicalInputError, NoSignChangeError, SolverNonConvergenceError: See :meth:`solve`.
        """
        calib = self._resolve_calibration(calibration)
        brackets = self._root_brackets(z, rigidity, measured, calib)
        return np.array([self._refine(b, z, rigidity, measured, calib) for b in brackets])

    def _solve(self, z: float, rigidity: float, measured: float,
               calibration: CalibrationLike = None, warn: bool = True) -> Tuple[float, int]:
        """
        Solve for the mass selected by ``root_selection``.

        :returns: Tuple (mass, number of roots found in the bracket).
        """
        calib = self._resolve_calibration(calibration)
        brackets = self._root_brackets(z, rigidity, measured, calib)
        heaviest = self.params.root_selection == "heaviest"
        if warn and len(brackets) > 1:
            logger.warning(
                f"{len(brackets)} mass solutions found for z={z}, rigidity={rigidity}, "
                f"measured={measured}; returning the {self.params.root_selection}."
            )
        chosen = brackets[-1] if heaviest else brackets[0]
        return self._refine(chosen, z, rigidity, measured, calib), len(brackets)

    def solve(self, z: float, rigidity: float, measured: float,
              calibration: CalibrationLike = None) -> float:
        """
        Find the mass whose predicted response equals the measurement.

        When several masses reproduce the measurement, the one picked by
        ``root_selection`` is returned and a warning is logged. Use
        :meth:`find_roots` to get all of them.

        :param z: Charge number.
        :type z: float
        :param rigidity: Rigidity [MeV/c per unit charge].
        :type rigidity: float
        :param measured: Measured detector response.
        :type measured: float
        :param calibration: Response calibration (thickness required for Landau-Vavilov).
        :type calibration: Calibration or sequence, optional

        :returns: Estimated mass [MeV].
        :rtype: float

        :raises NonPhysicalInputError: If β² leaves (0, 1) in the bracket or the inputs are not finite.
        :raises NoSignChangeError: If no mass in the bracket reproduces the measurement.
        :raises SolverNonConvergenceError: If the root finder does not converge within maxiter.
        """
        mass, _ = self._solve(z, rigidity, measured, calibration)
        return mass


def solve_mass(variant: str, z: float, rigidity: float, measured_response: float,
               calibration: CalibrationLike = None, thickness: Optional[float] = None,
               parameters: Optional[MassFinderParameters] = None,
               medium: Optional[EffectiveMedium] = None) -> float:
    """
    Estimate the mass from rigidity and measured response in one call.

    :param variant: 'Bethe-Bloch' ('BB') or 'Landau-Vavilov' ('LV').
    :type variant: str
    :param z: Charge number.
    :type z: float
    :param rigidity: Rigidity [MeV/c per unit charge].
    :type rigidity: float
    :param measured_response: Measured detector response.
    :type measured_response: float
    :param calibration: Response calibration, or an ordered (normalization, offset[, thickness]) sequence.
    :type calibration: Calibration or sequence, optional
    :param thickness: Detector thickness [cm]; overrides the calibration's thickness.
    :type thickness: float, optional
    :param parameters: Bracket and solver settings; the model name is taken from `variant`.
    :type parameters: MassFinderParameters, optional
    :param medium: Absorber medium. Defaults to the mixture named in the parameters.
    :type medium: EffectiveMedium, optional

    :returns: Estimated mass [MeV].
    :rtype: float

    :raises NonPhysicalInputError, NoSignChangeError, SolverNonConvergenceError: See :meth:`MassFinder.solve`.
    """
    if calibration is not None and not isinstance(calibration, Calibration):
        calibration = Calibration.from_sequence(calibration)
    if thickness is not None:
        calibration = replace(calibration or Calibration(), thickness=float(thickness))

    params = replace(parameters or MassFinderParameters(), model_name=variant)
    return MassFinder(params, medium=medium).solve(z, rigidity, measured_response, calibration)
