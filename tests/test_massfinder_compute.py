import numpy as np
import pandas as pd
import pytest

from pydedx.massfinder import MassFinder, MassFinderParameters, NoSignChangeError
from pydedx.physics.constants import SPECIES
from pydedx.physics.energy_loss import Calibration, mean_dedx, mpv_dedx

PROTON = SPECIES["proton"]
DEUTERON = SPECIES["deuteron"]
ALPHA = SPECIES["alpha"]


@pytest.fixture
def finder():
    return MassFinder()


def _hydrogen_events():
    rigidity = np.array([800.0, 1000.0, 700.0])
    dedx = np.array([
        mean_dedx(1, PROTON.mass, 800.0),
        mean_dedx(1, DEUTERON.mass, 1000.0),
        mean_dedx(1, PROTON.mass, 700.0),
    ])
    return rigidity, dedx, np.array([PROTON.mass, DEUTERON.mass, PROTON.mass])


def test_estimate_serial(finder):
    rigidity, dedx, expected = _hydrogen_events()
    df = finder.estimate(rigidity, dedx)
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["rigidity", "dedx", "charge", "mass", "n_solutions", "status"]
    assert (df["n_solutions"] == 1).all()
    assert (df["status"] == "ok").all()
    assert (df["charge"] == 1).all()
    np.testing.assert_allclose(df["mass"], expected, rtol=1e-6)

def test_estimate_parallel_matches_serial(finder):
    rigidity, dedx, expected = _hydrogen_events()
    serial = finder.estimate(rigidity, dedx)
    parallel = finder.estimate(rigidity, dedx, parallel=True, workers=2)
    pd.testing.assert_frame_equal(serial, parallel)
    np.testing.assert_allclose(parallel["mass"], expected, rtol=1e-6)

def test_estimate_broadcasts_scalars(finder):
    dedx = [mean_dedx(2, ALPHA.mass, 1000.0)] * 4
    df = finder.estimate(1000.0, dedx, charge=2)
    assert len(df) == 4
    assert (df["rigidity"] == 1000.0).all()
    np.testing.assert_allclose(df["mass"], ALPHA.mass, rtol=1e-6)

def test_estimate_landau_vavilov_with_calibration():
    finder = MassFinder(MassFinderParameters(model_name="LV"))
    calib = Calibration(normalization=3.0, offset=0.0, thickness=1.5)
    dedx = mpv_dedx(1, PROTON.mass, 900.0, calib)
    df = finder.estimate([900.0], [dedx], calibration=calib)
    np.testing.assert_allclose(df.loc[0, "mass"], PROTON.mass, rtol=1e-6)

def test_estimate_coerce_records_failures(finder):
    good = mean_dedx(1, PROTON.mass, 700.0)
    df = finder.estimate([700.0, 700.0, 0.0], [good, 1.0, good], errors="coerce")
    assert list(df["status"]) == ["ok", "NoSignChangeError", "NonPhysicalInputError"]
    assert np.isfinite(df.loc[0, "mass"])
    assert df["mass"].iloc[1:].isna().all()
    assert list(df["n_solutions"]) == [1, 0, 0]

def test_estimate_flags_ambiguous_events(finder):
    pion = SPECIES["pion"]
    dedx = [mean_dedx(1, pion.mass, 1000.0), mean_dedx(1, DEUTERON.mass, 1000.0)]
    df = finder.estimate([1000.0, 1000.0], dedx)
    assert list(df["status"]) == ["ambiguous", "ok"]
    assert list(df["n_solutions"]) == [2, 1]
    assert df.loc[0, "mass"] > 2 * pion.mass

    lightest = MassFinder(MassFinderParameters(root_selection="lightest"))
    df = lightest.estimate([1000.0], dedx[:1])
    assert df.loc[0, "status"] == "ambiguous"
    np.testing.assert_allclose(df.loc[0, "mass"], pion.mass, rtol=1e-6)

def test_estimate_raise_propagates(finder):
    with pytest.raises(NoSignChangeError):
        finder.estimate([1000.0, 1000.0], [mean_dedx(1, PROTON.mass, 1000.0), 1.0])

def test_estimate_invalid_errors_mode(finder):
    with pytest.raises(ValueError, match="Invalid errors mode"):
        finder.estimate([1000.0], [0.003], errors="ignore")

def test_estimate_mismatched_lengths(finder):
    with pytest.raises(ValueError):
        finder.estimate([1000.0, 900.0], [0.003, 0.004, 0.005])

def test_expected_curves(finder):
    rigidity = [500.0, 1000.0, 2000.0]
    df = finder.expected_curves(rigidity, species=["proton", "He4"])
    assert list(df.columns) == ["rigidity", "proton", "alpha"]
    np.testing.assert_allclose(df["proton"], mean_dedx(1, PROTON.mass, np.array(rigidity)))
    np.testing.assert_allclose(df["alpha"], mean_dedx(2, ALPHA.mass, np.array(rigidity)))

def test_expected_curves_all_species(finder):
    df = finder.expected_curves(1000.0)
    assert len(df) == 1
    assert set(SPECIES) <= set(df.columns)

def test_expected_curves_unknown_species(finder):
    with pytest.raises(ValueError, match="Unknown particle species"):
        finder.expected_curves([1000.0], species=["kaon"])
