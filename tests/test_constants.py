import numpy as np
import pytest

from pydedx.physics.constants import (
    AMU,
    DEFAULT_MEDIUM,
    SPECIES,
    EffectiveMedium,
    GasComponent,
    ParticleSpecies,
    SternheimerParameters,
    get_species,
    resolve_medium,
)


def _gas(name="X", Z=10.0, A=20.0, I_eV=50.0):
    return GasComponent(name=name, atomic_number=Z, atomic_mass=A, mean_excitation=I_eV * 1e-6,
                        sternheimer=SternheimerParameters(C=10.0, a=0.1, x0=1.5, x1=4.0, k=3.0))

# --- Species ---

def test_species_table_contents():
    assert SPECIES["proton"].charge == 1
    np.testing.assert_allclose(SPECIES["proton"].mass, 938.2720813)
    assert SPECIES["alpha"].charge == 2
    assert SPECIES["lithium-7"].charge == 3
    assert SPECIES["negative-pion"].charge == -1

def test_species_mass_from_amu():
    np.testing.assert_allclose(SPECIES["helium-6"].mass, 6.0188 * AMU)
    np.testing.assert_allclose(SPECIES["lithium-6"].mass, 6.0151 * AMU)
    np.testing.assert_allclose(SPECIES["lithium-7"].mass, 7.016 * AMU)

def test_species_table_is_read_only():
    with pytest.raises(TypeError):
        SPECIES["muon"] = ParticleSpecies("muon", "mu", 1, 105.66)

def test_get_species_by_name_and_symbol():
    assert get_species("Deuteron") is SPECIES["deuteron"]
    assert get_species("he3") is SPECIES["helium-3"]
    assert get_species(SPECIES["triton"]) is SPECIES["triton"]

def test_get_species_unknown():
    with pytest.raises(ValueError, match="Unknown particle species: kaon"):
        get_species("kaon")

# --- Effective medium ---

def test_p10_effective_parameters():
    med = DEFAULT_MEDIUM
    assert med.name == "P10"
    np.testing.assert_allclose(med.atomic_number, 0.9 * 18 + 0.1 * 10)
    np.testing.assert_allclose(med.atomic_mass, 0.9 * 39.95 + 0.1 * (12.01 + 4 * 1.00794))
    expected_ln_i = (0.9 * 18 * np.log(188e-6) + 0.1 * 10 * np.log(41.7e-6)) / 17.2
    np.testing.assert_allclose(med.log_mean_excitation, expected_ln_i)
    np.testing.assert_allclose(med.mean_excitation, np.exp(expected_ln_i))
    np.testing.assert_allclose(med.density, 1.534e-3)

def test_effective_medium_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_MEDIUM.density = 1.0

def test_single_component_medium_matches_component():
    gas = _gas()
    med = EffectiveMedium("pure", (gas,), (1.0,), density=1e-3)
    assert med.atomic_number == gas.atomic_number
    np.testing.assert_allclose(med.mean_excitation, gas.mean_excitation)
    np.testing.assert_allclose(med.z_over_a, 0.5)

def test_weights_must_sum_to_one():
    with pytest.raises(ValueError, match="must sum to 1"):
        EffectiveMedium("bad", (_gas("A"), _gas("B")), (0.5, 0.6), density=1e-3)

def test_weights_count_mismatch():
    with pytest.raises(ValueError, match="2 components but 1 weights"):
        EffectiveMedium("bad", (_gas("A"), _gas("B")), (1.0,), density=1e-3)

def test_negative_weight_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        EffectiveMedium("bad", (_gas("A"), _gas("B")), (1.5, -0.5), density=1e-3)

def test_non_positive_density_rejected():
    with pytest.raises(ValueError, match="density must be positive"):
        EffectiveMedium("bad", (_gas(),), (1.0,), density=0.0)

def test_sternheimer_boundaries_validated():
    with pytest.raises(ValueError, match="must be greater than x0"):
        SternheimerParameters(C=1.0, a=0.1, x0=3.0, x1=2.0, k=3.0)

def test_gas_component_from_dict_missing_fields():
    with pytest.raises(ValueError, match="Missing required field\\(s\\) for gas 'Ne'"):
        GasComponent.from_dict("Ne", {"atomic_number": 10})

def test_unknown_mixture():
    with pytest.raises(ValueError, match="Unknown gas mixture 'Xe-CO2'"):
        EffectiveMedium.from_registry("Xe-CO2")

def test_resolve_medium():
    assert resolve_medium() is DEFAULT_MEDIUM
    assert resolve_medium("P10") is DEFAULT_MEDIUM
    custom = EffectiveMedium("pure", (_gas(),), (1.0,), density=1e-3)
    assert resolve_medium(custom) is custom
