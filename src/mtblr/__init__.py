"""mtblr: multi-task Bayesian linear regression with a structured weight prior"""
from __future__ import annotations

import jax
jax.config.update("jax_enable_x64", True)

from .errors import *
from .linalg import *
from .hyper import *
from .prior import *
from .posterior import *
from .likelihood import *
from .predictive import *
from .model import *

__version__ = "0.1"
