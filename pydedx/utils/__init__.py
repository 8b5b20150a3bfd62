"""
Utility submodule for pyDEDX.

Modules
-------

- :mod:`parallel`:
  Defines :func:`~pydedx.utils.parallel.process_pool_plan`, which sizes the
  process pool and chunks of batch mass estimation.
"""
