import collections
import logging
import numbers

import numpy as np
import pandas as pd

from . import linalg
from .errors import DimensionMismatch

logger = logging.getLogger(__name__)


# hyp = [log(beta), log(alpha1[0]), ..., log(alpha1[ntasks-1]), log(alpha2),
#        log(alphaextra[0]), ..., log(alphaextra[nkernels-1])]
#
# beta is the noise precision, alpha1 the per-task terms, alpha2 the shared
# coupling and alphaextra the weights of the extra coupling kernels

Hyperparameters = collections.namedtuple('Hyperparameters', ['beta', 'alpha1', 'alpha2', 'alphaextra'])


def nhyper(ntasks, nkernels=0):
    return 2 + ntasks + nkernels


def hypernames(ntasks, nkernels=0, log=True):
    prefix = 'log_' if log else ''

    return ([f'{prefix}beta'] +
            [f'{prefix}alpha1[{i}]' for i in range(ntasks)] +
            [f'{prefix}alpha2'] +
            [f'{prefix}alphaextra[{k}]' for k in range(nkernels)])


def decode(hyp, ntasks, nkernels=0):
    """Map the log-scale vector `hyp` to positive natural-scale Hyperparameters."""

    jnp = linalg.jnp

    if np.ndim(hyp) != 1 or np.shape(hyp)[0] != nhyper(ntasks, nkernels):
        raise DimensionMismatch(f'Expected a vector of {nhyper(ntasks, nkernels)} hyperparameters '
                                f'for {ntasks} tasks and {nkernels} extra kernels, got shape {np.shape(hyp)}.')

    hyp = linalg.jnparray(hyp)

    hp = Hyperparameters(beta=jnp.exp(hyp[0]),
                         alpha1=jnp.exp(hyp[1:ntasks+1]),
                         alpha2=jnp.exp(hyp[ntasks+1]),
                         alphaextra=jnp.exp(hyp[ntasks+2:]))

    logger.debug('decoded hyperparameters: beta=%s alpha1=%s alpha2=%s alphaextra=%s', *hp)

    return hp


def encode(beta, alpha1, alpha2, alphaextra=()):
    """Inverse of `decode`: natural-scale values to the log-scale `hyp` vector."""

    xs = np.concatenate([[beta], np.atleast_1d(alpha1), [alpha2], np.atleast_1d(alphaextra)]).astype(np.float64)

    if np.any(xs <= 0):
        raise ValueError('All hyperparameters must be strictly positive.')

    return np.log(xs)


def to_dict(hyp, ntasks, nkernels=0):
    hp = decode(hyp, ntasks, nkernels)
    xs = np.concatenate([[hp.beta], np.asarray(hp.alpha1), [hp.alpha2], np.asarray(hp.alphaextra)])

    return dict(zip(hypernames(ntasks, nkernels, log=False), map(float, xs)))


def to_df(hyps, ntasks, nkernels=0):
    """Natural-scale table of one `hyp` vector or a stack of them (one per row),
    for instance the trace of an external optimizer."""

    hyps = np.atleast_2d(np.asarray(hyps, dtype=np.float64))

    if hyps.ndim != 2 or hyps.shape[1] != nhyper(ntasks, nkernels):
        raise DimensionMismatch(f'Expected rows of {nhyper(ntasks, nkernels)} hyperparameters, got shape {hyps.shape}.')

    return pd.DataFrame(np.exp(hyps), columns=hypernames(ntasks, nkernels, log=False))


def check_inputs(X, t, ntasks, ndims, kernels=(), xs=None):
    """Check every shape contract before any linear algebra runs.

    Returns X, t, kernels and xs converted to backend arrays; a column-vector
    `t` is flattened.
    """

    for name, n in [('ntasks', ntasks), ('ndims', ndims)]:
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 1:
            raise DimensionMismatch(f'{name} must be a positive integer, got {n!r}.')

    X = linalg.jnparray(X)
    if X.ndim != 2:
        raise DimensionMismatch(f'X must be a 2D matrix, got shape {X.shape}.')

    N, D = X.shape
    if N == 0:
        raise DimensionMismatch('X has no observations.')
    if D != ntasks * ndims:
        raise DimensionMismatch(f'X has {D} columns, but ntasks * ndims = {ntasks} * {ndims} = {ntasks * ndims}.')

    t = linalg.jnparray(t)
    if t.ndim == 2 and t.shape[1] == 1:
        t = t[:, 0]
    if t.shape != (N,):
        raise DimensionMismatch(f'Expected {N} targets to match the rows of X, got shape {t.shape}.')

    kernels = [linalg.jnparray(kernel) for kernel in kernels]
    for k, kernel in enumerate(kernels):
        if kernel.shape != (ntasks, ntasks):
            raise DimensionMismatch(f'Extra kernel {k} has shape {kernel.shape}, expected ({ntasks}, {ntasks}).')

    if xs is not None:
        xs = linalg.jnparray(xs)
        if xs.ndim != 2 or xs.shape[1] != D:
            raise DimensionMismatch(f'Test inputs must have shape (Ntest, {D}), got {xs.shape}.')

    return X, t, kernels, xs
