"""seirsvbh, inverse and direct problems for a time-dependent SEIRSVBH model.

The inverse solver recovers daily transmission, recovery, hospitalization
and vaccination rates from reported epidemic series. The direct solver
integrates the model forward with those rates so the fit can be scored
against the data over a grid of solver settings (xi, c).
"""

import importlib
import logging

from . import analysis, config, inverse, simulation, typing, utils

# silent unless the application configures logging, see utils.use_logging
logging.getLogger("seirsvbh").addHandler(logging.NullHandler())

# Defines all the different modules able to be imported from src
__all__ = ["config", "utils", "inverse", "simulation", "analysis", "typing"]
submodules = ["config", "utils", "inverse", "simulation", "analysis", "typing"]
# Append the __all__ of all submodules to the main __all__
for submodule in submodules:
    module = importlib.import_module(f".{submodule}", package="seirsvbh")
    if hasattr(module, "__all__"):
        for attr in module.__all__:
            globals()[attr] = getattr(module, attr)
            __all__.append(attr)
# effectively flattens all submodules into the seirsvbh namespace.
