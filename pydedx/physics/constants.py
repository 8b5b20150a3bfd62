"""
Physical constants, particle species and effective gas media.

This module holds the static parameterization of the energy-loss models:

- Fundamental constants (electron mass, Bethe-Bloch constant K, atomic mass unit)
- :class:`ParticleSpecies` and the read-only :data:`SPECIES` lookup table
- :class:`GasComponent` with its :class:`SternheimerParameters`
- :class:`EffectiveMedium`, the single-component approximation of a gas mixture

Everything here is built once at import time and never mutated afterwards.
Formulas follow the PDG review, chapter "Passage of particles through matter".

Examples
--------

>>> from pydedx.physics.constants import get_species, DEFAULT_MEDIUM
>>> get_species("d").mass
1875.612762
>>> round(DEFAULT_MEDIUM.atomic_number, 2)
17.2
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union
import numpy as np

from pydedx.io.data_registry import load_gas_table, load_species_table

ELECTRON_MASS = 0.5109989461   # MeV
BETHE_BLOCH_K = 0.307075       # 4*pi*Na*re^2*me*c^2 [MeV cm2/mol]
AMU = 931.478                  # MeV
LN10 = float(np.log(10.0))


@dataclass(frozen=True)
class ParticleSpecies:
    """
    A named (charge, mass) pair.

    :ivar name: Species name (e.g. "deuteron").
    :ivar symbol: Short symbol (e.g. "d").
    :ivar charge: Charge number z (signed).
    :ivar mass: Rest mass in MeV.
    """

    name: str
    symbol: str
    charge: int
    mass: float


@dataclass(frozen=True)
class SternheimerParameters:
    """
    Sternheimer density-effect parameters of one material.

    :ivar C: Offset constant (-C is the asymptotic intercept).
    :ivar a: Coefficient of the intermediate-region polynomial term.
    :ivar x0: Lower boundary in log10(βγ) below which δ = 0.
    :ivar x1: Upper boundary in log10(βγ) above which δ is linear in x.
    :ivar k: Exponent of the intermediate-region term.
    """

    C: float
    a: float
    x0: float
    x1: float
    k: float

    def __post_init__(self):
        if self.x1 <= self.x0:
            raise ValueError(f"Sternheimer x1 ({self.x1}) must be greater than x0 ({self.x0}).")


@dataclass(frozen=True)
class GasComponent:
    """
    One component of a gas mixture.

    :ivar name: Component name (e.g. "Ar").
    :ivar atomic_number: Atomic number Z (summed over the molecule).
    :ivar atomic_mass: Atomic mass A in g/mol (summed over the molecule).
    :ivar mean_excitation: Mean excitation energy I in MeV.
    :ivar sternheimer: Density-effect parameters.
    """

    name: str
    atomic_number: float
    atomic_mass: float
    mean_excitation: float
    sternheimer: SternheimerParameters

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "GasComponent":
        """
        Build a component from a ``gases.json`` entry.

        :param name: Component name.
        :type name: str
        :param data: Entry with atomic_number, atomic_mass, mean_excitation_eV and sternheimer.
        :type data: dict

        :returns: The gas component, with I converted from eV to MeV.
        :rtype: GasComponent

        :raises ValueError: If required fields are missing.
        """
        required = ["atomic_number", "atomic_mass", "mean_excitation_eV", "sternheimer"]
        missing = [k for k in required if k not in data]
        if missing:
            raise ValueError(f"Missing required field(s) for gas '{name}': {', '.join(missing)}")
        return cls(
            name=name,
            atomic_number=float(data["atomic_number"]),
            atomic_mass=float(data["atomic_mass"]),
            mean_excitation=float(data["mean_excitation_eV"]) * 1e-6,
            sternheimer=SternheimerParameters(**data["sternheimer"]),
        )


@dataclass(frozen=True)
class EffectiveMedium:
    """
    Single-component approximation of a gas mixture.

    The effective values are weighted by the mixture fractions ``w_i``:

    - Z_eff = Σ w_i Z_i
    - A_eff = Σ w_i A_i
    - ln I_eff = Σ w_i Z_i ln I_i / Z_eff

    Density-effect curves are not mixed here: they are evaluated per component
    and combined with the same weights by
    :func:`~pydedx.physics.density_effect.effective_density_effect`.

    :ivar name: Mixture name.
    :ivar components: Gas components of the mixture.
    :ivar weights: Mixture fractions, one per component, summing to 1.
    :ivar density: Mixture density in g/cm³.
    """

    name: str
    components: Tuple[GasComponent, ...]
    weights: Tuple[float, ...]
    density: float
    atomic_number: float = field(init=False)
    atomic_mass: float = field(init=False)
    log_mean_excitation: float = field(init=False)

    def __post_init__(self):
        components = tuple(self.components)
        weights = tuple(float(w) for w in self.weights)
        if not components:
            raise ValueError("A medium needs at least one component.")
        if len(components) != len(weights):
            raise ValueError(
                f"Got {len(components)} components but {len(weights)} weights."
            )
        if any(w < 0 for w in weights):
            raise ValueError("Mixture weights must be non-negative.")
        if not np.isclose(sum(weights), 1.0, rtol=0.0, atol=1e-9):
            raise ValueError(f"Mixture weights must sum to 1 (got {sum(weights)}).")
        if self.density <= 0:
            raise ValueError("Medium density must be positive.")

        z_eff = sum(w * c.atomic_number for w, c in zip(weights, components))
        a_eff = sum(w * c.atomic_mass for w, c in zip(weights, components))
        ln_i = sum(
            w * c.atomic_number * np.log(c.mean_excitation) for w, c in zip(weights, components)
        ) / z_eff

        object.__setattr__(self, "components", components)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "density", float(self.density))
        object.__setattr__(self, "atomic_number", float(z_eff))
        object.__setattr__(self, "atomic_mass", float(a_eff))
        object.__setattr__(self, "log_mean_excitation", float(ln_i))

    @property
    def mean_excitation(self) -> float:
        """Effective mean excitation energy I_eff in MeV."""
        return float(np.exp(self.log_mean_excitation))

    @property
    def z_over_a(self) -> float:
        """Ratio Z_eff / A_eff in mol/g."""
        return self.atomic_number / self.atomic_mass

    @classmethod
    def from_registry(cls, name: str = "P10") -> "EffectiveMedium":
        """
        Build a named mixture from the bundled ``gases.json``.

        :param name: Mixture name (e.g. "P10").
        :type name: str

        :returns: The effective medium.
        :rtype: EffectiveMedium

        :raises ValueError: If the mixture or one of its components is unknown.
        """
        table = load_gas_table()
        mixtures = table["mixtures"]
        if name not in mixtures:
            raise ValueError(f"Unknown gas mixture '{name}'. Available: {sorted(mixtures)}")
        mixture = mixtures[name]
        components, weights = [], []
        for gas, fraction in mixture["components"].items():
            if gas not in table["components"]:
                raise ValueError(f"Mixture '{name}' refers to unknown gas component '{gas}'.")
            components.append(GasComponent.from_dict(gas, table["components"][gas]))
            weights.append(fraction)
        return cls(name=name, components=tuple(components), weights=tuple(weights),
                   density=mixture["density"])


def _build_species_table() -> Mapping[str, ParticleSpecies]:
    """
    Build the read-only species table from ``species.json``.

    Entries carry either ``mass`` in MeV or ``mass_amu`` in atomic mass units.
    """
    species: Dict[str, ParticleSpecies] = {}
    for name, entry in load_species_table().items():
        if "mass" in entry:
            mass = float(entry["mass"])
        elif "mass_amu" in entry:
            mass = float(entry["mass_amu"]) * AMU
        else:
            raise ValueError(f"Species '{name}' has neither 'mass' nor 'mass_amu'.")
        species[name] = ParticleSpecies(name=name, symbol=entry["symbol"],
                                        charge=int(entry["charge"]), mass=mass)
    return MappingProxyType(species)


SPECIES: Mapping[str, ParticleSpecies] = _build_species_table()
DEFAULT_MEDIUM: EffectiveMedium = EffectiveMedium.from_registry("P10")


def get_species(identifier: Union[str, ParticleSpecies]) -> ParticleSpecies:
    """
    Resolve a species by name or symbol (case-insensitive).

    :param identifier: Species name ("proton"), symbol ("p") or a ParticleSpecies.
    :type identifier: str or ParticleSpecies

    :returns: The matching species.
    :rtype: ParticleSpecies

    :raises ValueError: If no species matches.
    """
    if isinstance(identifier, ParticleSpecies):
        return identifier
    key = str(identifier).strip().lower()
    for sp in SPECIES.values():
        if key == sp.name.lower() or key == sp.symbol.lower():
            return sp
    raise ValueError(f"Unknown particle species: {identifier}")


def resolve_medium(medium: Optional[Union[str, EffectiveMedium]] = None) -> EffectiveMedium:
    """
    Return an :class:`EffectiveMedium` from an instance, a registry name or None (P10).
    """
    if medium is None:
        return DEFAULT_MEDIUM
    if isinstance(medium, EffectiveMedium):
        return medium
    if medium == DEFAULT_MEDIUM.name:
        return DEFAULT_MEDIUM
    return EffectiveMedium.from_registry(medium)
