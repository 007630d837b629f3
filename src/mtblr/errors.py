import numpy as np


class BLRError(Exception):
    pass


class ArgumentCountError(BLRError, TypeError):
    """Call shape is neither the evidence nor the prediction form."""


class DimensionMismatch(BLRError, ValueError):
    """Inconsistent lengths or shapes among hyp, X, t, xs and the extra kernels."""


class NumericalError(BLRError, np.linalg.LinAlgError):
    pass


class NotPositiveDefinite(NumericalError):
    def __init__(self, which, detail=None):
        self.which = which

        msg = f"Cholesky factorization of the {which} failed: matrix is not positive definite."
        if detail:
            msg = f"{msg} ({detail})"

        super().__init__(msg)
