"""
Sternheimer density-effect correction.

The correction δ reduces the ionization loss of fast particles through the
polarization of the medium. With x = log10(βγ) it reads:

- x < x0:        δ = 0
- x0 ≤ x < x1:   δ = 2 ln10 x − C + a (x1 − x)^k
- x ≥ x1:        δ = 2 ln10 x − C

For a gas mixture the curve of every component is evaluated separately and the
results are combined as δ_eff = Σ w_i Z_i δ_i(x) / Z_eff.
"""

from typing import Union
import numpy as np

from pydedx.physics.constants import LN10, EffectiveMedium, GasComponent, SternheimerParameters

ArrayLike = Union[float, np.ndarray]


def _as_output(values: np.ndarray, like) -> ArrayLike:
    """Return a Python float for scalar input, the array otherwise."""
    return float(values) if np.ndim(like) == 0 else values


def density_effect(component: Union[GasComponent, SternheimerParameters], x: ArrayLike) -> ArrayLike:
    """
    Evaluate the density-effect correction δ(x) of one material.

    :param component: Gas component, or its Sternheimer parameters directly.
    :type component: GasComponent or SternheimerParameters
    :param x: log10(βγ), scalar or array.
    :type x: float or np.ndarray

    :returns: δ at each x (float for scalar input).
    :rtype: float or np.ndarray
    """
    p = component.sternheimer if isinstance(component, GasComponent) else component
    x_arr = np.asarray(x, dtype=float)

    high = 2.0 * LN10 * x_arr - p.C
    # clip keeps the power real outside the intermediate region, where it is discarded
    mid = high + p.a * np.power(np.clip(p.x1 - x_arr, 0.0, None), p.k)
    delta = np.where(x_arr < p.x0, 0.0, np.where(x_arr < p.x1, mid, high))
    return _as_output(delta, x)


def effective_density_effect(medium: EffectiveMedium, x: ArrayLike) -> ArrayLike:
    """
    Mix the per-component density-effect curves of a medium.

    :param medium: Effective gas medium.
    :type medium: EffectiveMedium
    :param x: log10(βγ), scalar or array.
    :type x: float or np.ndarray

    :returns: δ_eff at each x (float for scalar input).
    :rtype: float or np.ndarray
    """
    x_arr = np.asarray(x, dtype=float)
    total = np.zeros_like(x_arr)
    for weight, component in zip(medium.weights, medium.components):
        total = total + weight * component.atomic_number * density_effect(component, x_arr)
    return _as_output(total / medium.atomic_number, x)
