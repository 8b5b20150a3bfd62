"""
Batch computation engine for MassFinder.

This module adds two table-producing methods to :class:`~pydedx.massfinder.core.MassFinder`:

- :meth:`estimate`: mass estimates for many (rigidity, response, charge) measurements
- :meth:`expected_curves`: predicted response vs. rigidity for a set of particle species

Each measurement is solved independently with its own root-finder call, either
serially or on a process pool. The solver is CPU bound and holds the GIL, so
threads would not run events concurrently.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Union
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from tqdm import tqdm

from pydedx.physics.constants import SPECIES, ParticleSpecies, get_species
from pydedx.utils.parallel import process_pool_plan

from .core import MassFinder, CalibrationLike
from .errors import MassInversionError

_ERROR_MODES = ("raise", "coerce")
_COLUMNS = ["rigidity", "dedx", "charge", "mass", "n_solutions", "status"]


def _estimate_single(finder: MassFinder, calibration: CalibrationLike, errors: str, job: tuple) -> dict:
    """
    Solve one measurement.

    Runs in worker processes, so it lives at module level and takes the
    finder as an argument.

    :param finder: Configured MassFinder.
    :param calibration: Response calibration shared by all measurements.
    :param errors: 'raise' to propagate failures, 'coerce' to record them.
    :param job: Tuple (rigidity, dedx, charge).

    :return: Row with the mass, the number of roots and the status
        ('ok', 'ambiguous' or the failure class name).
    :rtype: dict
    """
    rigidity, dedx, charge = job
    try:
        mass, n_solutions = finder._solve(charge, rigidity, dedx, calibration, warn=False)
        status = "ok" if n_solutions == 1 else "ambiguous"
    except MassInversionError as exc:
        if errors == "raise":
            raise
        mass, n_solutions = np.nan, 0
        status = type(exc).__name__
    return {"rigidity": rigidity, "dedx": dedx, "charge": charge,
            "mass": mass, "n_solutions": n_solutions, "status": status}


def estimate(
    self: MassFinder,
    rigidity: Union[float, List[float], np.ndarray],
    dedx: Union[float, List[float], np.ndarray],
    charge: Union[float, List[float], np.ndarray] = 1,
    calibration: CalibrationLike = None,
    parallel: bool = False,
    errors: str = "raise",
    workers: Optional[int] = None
) -> pd.DataFrame:
    """
    Estimate masses for a batch of measurements.

    Inputs are broadcast to a common length, so a single charge or rigidity can
    be shared by all measurements. Events admitting several masses get the one
    picked by ``root_selection`` and the status 'ambiguous'.

    :param self: MassFinder instance.
    :type self: MassFinder
    :param rigidity: Rigidities [MeV/c per unit charge].
    :type rigidity: float or list or np.ndarray
    :param dedx: Measured responses.
    :type dedx: float or list or np.ndarray
    :param charge: Charge numbers.
    :type charge: float or list or np.ndarray
    :param calibration: Response calibration shared by all measurements.
    :type calibration: Calibration or sequence, optional
    :param parallel: Whether to solve on a process pool.
    :type parallel: bool
    :param errors: 'raise' re-raises the first failure; 'coerce' stores NaN and the failure name.
    :type errors: str
    :param workers: Requested number of worker processes (capped by CPU count and batch size).
    :type workers: int, optional

    :returns: DataFrame with columns rigidity, dedx, charge, mass, n_solutions, status.
    :rtype: pandas.DataFrame

    :raises ValueError: If `errors` is invalid or the inputs cannot be broadcast.
    """
    if errors not in _ERROR_MODES:
        raise ValueError(f"Invalid errors mode '{errors}'. Choose one of: {list(_ERROR_MODES)}")

    r_arr, d_arr, z_arr = np.broadcast_arrays(
        np.atleast_1d(np.asarray(rigidity, dtype=float)),
        np.atleast_1d(np.asarray(dedx, dtype=float)),
        np.atleast_1d(np.asarray(charge, dtype=float)),
    )
    job_list = [(float(r), float(d), float(z)) for r, d, z in zip(r_arr, d_arr, z_arr)]
    func = partial(_estimate_single, self, calibration, errors)

    if parallel:
        worker_count, chunksize = process_pool_plan(len(job_list), user_requested=workers)
        with ProcessPoolExecutor(max_workers=worker_count) as executor:
            rows = list(tqdm(
                executor.map(func, job_list, chunksize=chunksize),
                total=len(job_list),
                desc=f"[{worker_count} workers] {self.model_name}",
                unit="event"
            ))
    else:
        rows = [func(job) for job in tqdm(job_list, desc=self.model_name, unit="event")]

    return pd.DataFrame(rows, columns=_COLUMNS)


def expected_curves(
    self: MassFinder,
    rigidity: Union[float, List[float], np.ndarray],
    species: Optional[List[Union[str, ParticleSpecies]]] = None,
    calibration: CalibrationLike = None
) -> pd.DataFrame:
    """
    Tabulate the predicted response vs. rigidity for several particle species.

    :param self: MassFinder instance.
    :type self: MassFinder
    :param rigidity: Rigidity grid [MeV/c per unit charge].
    :type rigidity: float or list or np.ndarray
    :param species: Species names, symbols or instances. If None, all bundled species are used.
    :type species: list, optional
    :param calibration: Response calibration.
    :type calibration: Calibration or sequence, optional

    :returns: DataFrame with a 'rigidity' column and one column per species name.
    :rtype: pandas.DataFrame

    :raises ValueError: If a species is unknown.
    """
    r_arr = np.atleast_1d(np.asarray(rigidity, dtype=float))
    selected = [get_species(s) for s in (species or list(SPECIES))]

    columns = {"rigidity": r_arr}
    for sp in selected:
        columns[sp.name] = np.asarray(
            self.predict(sp.charge, sp.mass, r_arr, calibration), dtype=float
        ) * np.ones_like(r_arr)
    return pd.DataFrame(columns)


MassFinder.estimate = estimate
MassFinder.expected_curves = expected_curves
