import logging

import numpy as np
import scipy as sp
import scipy.linalg

import jax
import jax.numpy
import jax.scipy
import jax.scipy.linalg

from .errors import NumericalError, NotPositiveDefinite

logger = logging.getLogger(__name__)

__all__ = ['config', 'cholesky', 'cholsolve', 'cholesky_logdet', 'matrix_norm']


def config(**kwargs):
    global jnp, jsp, jnparray, backend

    name = kwargs.get('backend', 'numpy')

    if name == 'numpy':
        jnp, jsp = np, sp

        jnparray = lambda a: np.array(a, dtype=np.float64)
    elif name == 'jax':
        jnp, jsp = jax.numpy, jax.scipy

        # float64 when jax_enable_x64 is set, as it is on import of mtblr
        jnparray = lambda a: jnp.array(a, dtype=float)
    else:
        raise ValueError('Supported backends are currently numpy and jax.')

    backend = name
    logger.debug('linear algebra backend set to %s', backend)

config(backend='numpy')


# log|M| = matrix_norm * sum(log(diag(cf))) for the Cholesky factor cf of M
matrix_norm = 2.0


def cholesky(a, name='matrix'):
    """Upper Cholesky factor of `a`, as the `(c, lower)` pair used by `cholsolve`.

    Raises NotPositiveDefinite naming the factorization when `a` cannot be
    factored. On the jax backend a failed factorization yields NaNs instead
    of an exception, so the factor is checked whenever its values are
    concrete (traced values are passed through unchecked).
    """

    try:
        cf = jsp.linalg.cho_factor(a, lower=False)
    except np.linalg.LinAlgError as e:
        logger.error('cannot factor the %s (%d x %d)', name, *np.shape(a))
        raise NotPositiveDefinite(name, str(e)) from e
    except ValueError as e:
        logger.error('non-finite entries in the %s', name)
        raise NumericalError(f'Cannot factor the {name}: {e}') from e

    try:
        finite = bool(jnp.all(jnp.isfinite(cf[0])))
    except jax.errors.ConcretizationTypeError:
        return cf

    if not finite:
        logger.error('cannot factor the %s (%d x %d)', name, *np.shape(a))
        raise NotPositiveDefinite(name)

    return cf


def cholsolve(cf, b):
    return jsp.linalg.cho_solve(cf, b)


def cholesky_logdet(cf):
    return matrix_norm * jnp.sum(jnp.log(jnp.abs(jnp.diag(cf[0]))))
