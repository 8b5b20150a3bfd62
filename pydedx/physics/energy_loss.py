"""
Ionization energy-loss models for charged particles in a gas mixture.

This module implements two formulas from the PDG review of particle passage
through matter, both including the Sternheimer density-effect correction:

- Bethe-Bloch mean energy loss, :func:`bethe_bloch_dedx` / :func:`mean_dedx`
- Landau-Vavilov most probable energy loss, :func:`landau_vavilov_mpv` / :func:`mpv_dedx`

The particle is described by its charge number z, its rest mass m [MeV] and its
rigidity R = p/z [MeV/c per unit charge]. The physical energy loss is mapped to
the detector response through an affine :class:`Calibration`.

Both formulas diverge as 1/β² for β² → 0. They are not guarded there: callers
must restrict the rigidity to the range where the formulas are valid.

Usage
-----

.. code-block:: python

    from pydedx.physics.energy_loss import Calibration, mean_dedx, mpv_dedx

    mean_dedx(1, 938.272, 1000.0)                      # ~3.4e-3 MeV/cm in P10
    mpv_dedx(2, 3727.38, 800.0, Calibration(1.0, 0.0, thickness=1.0))
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union
import numpy as np

from pydedx.physics.constants import (
    BETHE_BLOCH_K,
    ELECTRON_MASS,
    EffectiveMedium,
    ParticleSpecies,
    get_species,
    resolve_medium,
)
from pydedx.physics.density_effect import effective_density_effect

ArrayLike = Union[float, np.ndarray]

BETHE_BLOCH = "Bethe-Bloch"
LANDAU_VAVILOV = "Landau-Vavilov"
MODEL_ALIASES = {
    "bethe-bloch": BETHE_BLOCH,
    "bb": BETHE_BLOCH,
    "landau-vavilov": LANDAU_VAVILOV,
    "lv": LANDAU_VAVILOV,
}


@dataclass(frozen=True)
class Calibration:
    """
    Affine map from physical energy loss to detector response.

    :ivar normalization: Scale factor, e.g. [MeV/cm] → [ADC/mm].
    :ivar offset: Additive offset in response units.
    :ivar thickness: Detector thickness in cm. Required by the Landau-Vavilov model.
    """

    normalization: float = 1.0
    offset: float = 0.0
    thickness: Optional[float] = None

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Calibration":
        """
        Build a calibration from an ordered (normalization, offset[, thickness]) sequence.

        :raises ValueError: If the sequence does not hold 2 or 3 values.
        """
        values = tuple(float(v) for v in values)
        if len(values) not in (2, 3):
            raise ValueError(
                f"Calibration expects (normalization, offset[, thickness]); got {len(values)} values."
            )
        return cls(*values)

    @classmethod
    def from_dict(cls, config: dict) -> "Calibration":
        """
        Build a calibration from a dictionary.

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        valid_keys = set(cls.__dataclass_fields__.keys())
        extra_keys = set(config.keys()) - valid_keys
        if extra_keys:
            raise ValueError(f"Unrecognized keys in Calibration config: {sorted(extra_keys)}")
        return cls(**config)

    def apply(self, physical: ArrayLike) -> ArrayLike:
        """Map a physical quantity to response units."""
        return self.normalization * physical + self.offset


def normalize_model_name(model_name: str) -> str:
    """
    Map a model name or alias to its canonical form.

    :raises ValueError: If the model is unknown.
    """
    key = str(model_name).strip().lower()
    if key not in MODEL_ALIASES:
        raise ValueError(
            f"Invalid model_name '{model_name}'. Choose one of: {[BETHE_BLOCH, LANDAU_VAVILOV]}"
        )
    return MODEL_ALIASES[key]


def _as_output(values: np.ndarray, *inputs) -> ArrayLike:
    return float(values) if all(np.ndim(v) == 0 for v in inputs) else values


def kinematics(z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute β² and γ² from charge, mass and rigidity.

    :param z: Charge number.
    :param mass: Rest mass [MeV].
    :param rigidity: Rigidity [MeV/c per unit charge].

    :returns: Tuple (beta2, gamma2) as arrays.
    :rtype: tuple[np.ndarray, np.ndarray]
    """
    mom = np.asarray(rigidity, dtype=float) * np.asarray(z, dtype=float)
    m = np.asarray(mass, dtype=float)
    b2 = mom * mom / (mom * mom + m * m)
    with np.errstate(divide="ignore"):
        g2 = 1.0 / (1.0 - b2)
    return b2, g2


def max_energy_transfer(beta2: ArrayLike, gamma2: ArrayLike, mass: ArrayLike) -> np.ndarray:
    """
    Maximum kinetic energy transferable to a free electron in a single collision [MeV].
    """
    b2 = np.asarray(beta2, dtype=float)
    g2 = np.asarray(gamma2, dtype=float)
    ratio = ELECTRON_MASS / np.asarray(mass, dtype=float)
    return 2.0 * ELECTRON_MASS * b2 * g2 / (1.0 + 2.0 * np.sqrt(g2) * ratio + ratio ** 2)


def _log10_beta_gamma(b2: np.ndarray, g2: np.ndarray) -> np.ndarray:
    return np.log10(np.sqrt(b2 * g2))


def bethe_bloch_dedx(z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike,
                     medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Bethe-Bloch mean energy loss per unit length [MeV/cm].

    dE/dx = K ρ z² (Z/A) / β² [½ ln(2 mₑ β²γ² W_max) − ln I − β² − δ/2]

    :param z: Charge number.
    :param mass: Rest mass [MeV].
    :param rigidity: Rigidity [MeV/c per unit charge].
    :param medium: Absorber medium. Defaults to P10.

    :returns: Mean energy loss (float for scalar inputs).
    :rtype: float or np.ndarray
    """
    med = resolve_medium(medium)
    b2, g2 = kinematics(z, mass, rigidity)
    w_max = max_energy_transfer(b2, g2, mass)
    delta = effective_density_effect(med, _log10_beta_gamma(b2, g2))
    z2 = np.asarray(z, dtype=float) ** 2

    bracket = (0.5 * np.log(2.0 * ELECTRON_MASS * b2 * g2 * w_max)
               - med.log_mean_excitation - b2 - 0.5 * delta)
    dedx = BETHE_BLOCH_K * med.density * z2 * med.z_over_a / b2 * bracket
    return _as_output(dedx, z, mass, rigidity)


def landau_vavilov_mpv(z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike, thickness: float,
                       medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Landau-Vavilov most probable energy loss in a layer of given thickness [MeV].

    Δp = ξ [ln(2 mₑ β²γ²) + ln ξ − 2 ln I + 0.2 − β² − δ],
    with ξ = (K/2) (Z/A) z² / β² ρ t.

    :param z: Charge number.
    :param mass: Rest mass [MeV].
    :param rigidity: Rigidity [MeV/c per unit charge].
    :param thickness: Layer thickness t [cm], strictly positive.
    :param medium: Absorber medium. Defaults to P10.

    :returns: Most probable energy loss (float for scalar inputs).
    :rtype: float or np.ndarray

    :raises ValueError: If thickness is not positive.
    """
    if thickness is None or not thickness > 0:
        raise ValueError("Landau-Vavilov model requires a positive detector thickness.")
    med = resolve_medium(medium)
    b2, g2 = kinematics(z, mass, rigidity)
    delta = effective_density_effect(med, _log10_beta_gamma(b2, g2))
    z2 = np.asarray(z, dtype=float) ** 2

    xi = BETHE_BLOCH_K / 2.0 * med.z_over_a * z2 / b2 * (med.density * thickness)
    delta_p = xi * (np.log(2.0 * ELECTRON_MASS * b2 * g2) + np.log(xi)
                    - 2.0 * med.log_mean_excitation + 0.2 - b2 - delta)
    return _as_output(delta_p, z, mass, rigidity)


def mean_dedx(z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike,
              calibration: Optional[Calibration] = None,
              medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Detector response predicted by the Bethe-Bloch mean energy loss.

    :param z: Charge number.
    :param mass: Rest mass [MeV].
    :param rigidity: Rigidity [MeV/c per unit charge].
    :param calibration: Response calibration. Defaults to identity (MeV/cm).
    :param medium: Absorber medium. Defaults to P10.

    :returns: normalization · dE/dx + offset.
    :rtype: float or np.ndarray
    """
    calib = calibration or Calibration()
    return calib.apply(bethe_bloch_dedx(z, mass, rigidity, medium))


def mpv_dedx(z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike,
             calibration: Calibration,
             medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Detector response predicted by the Landau-Vavilov most probable energy loss.

    :param z: Charge number.
    :param mass: Rest mass [MeV].
    :param rigidity: Rigidity [MeV/c per unit charge].
    :param calibration: Response calibration including the detector thickness.
    :param medium: Absorber medium. Defaults to P10.

    :returns: normalization · Δp / t + offset.
    :rtype: float or np.ndarray

    :raises ValueError: If the calibration carries no positive thickness.
    """
    delta_p = landau_vavilov_mpv(z, mass, rigidity, calibration.thickness, medium)
    return calibration.apply(delta_p / calibration.thickness)


def predict_dedx(model_name: str, z: ArrayLike, mass: ArrayLike, rigidity: ArrayLike,
                 calibration: Optional[Calibration] = None,
                 medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Dispatch to :func:`mean_dedx` or :func:`mpv_dedx` by model name.

    :param model_name: 'Bethe-Bloch' ('BB') or 'Landau-Vavilov' ('LV').
    :type model_name: str

    :raises ValueError: If the model is unknown, or if the Landau-Vavilov model
        is requested without a calibration.
    """
    model = normalize_model_name(model_name)
    if model == BETHE_BLOCH:
        return mean_dedx(z, mass, rigidity, calibration, medium)
    if calibration is None:
        raise ValueError("Landau-Vavilov model requires a calibration with a detector thickness.")
    return mpv_dedx(z, mass, rigidity, calibration, medium)


def species_dedx(species: Union[str, ParticleSpecies], rigidity: ArrayLike,
                 calibration: Optional[Calibration] = None,
                 model_name: str = BETHE_BLOCH,
                 medium: Optional[EffectiveMedium] = None) -> ArrayLike:
    """
    Predicted response curve of a named particle species.

    :param species: Species name, symbol or instance (e.g. "proton", "He3").
    :param rigidity: Rigidity [MeV/c per unit charge].

    :returns: Predicted response at each rigidity.
    :rtype: float or np.ndarray
    """
    sp = get_species(species)
    return predict_dedx(model_name, sp.charge, sp.mass, rigidity, calibration, medium)
