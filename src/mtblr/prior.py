import collections
import logging

import numpy as np

from . import linalg

logger = logging.getLogger(__name__)


# Sigma = kron(C, I_ndims), with the task-coupling matrix
#
#   C = diag(alpha1) + (alpha2 / ntasks) * ones(ntasks) + sum_k alphaextra[k] * kernels[k]
#
# so that the weights of different tasks are coupled only through C, uniformly
# across the ndims weights of each task

StructuredPrior = collections.namedtuple('StructuredPrior', ['C', 'Sigma', 'cf', 'logdet', 'derivatives'])


def coupling_matrix(hp, kernels=()):
    jnp = linalg.jnp
    ntasks = hp.alpha1.shape[0]

    C = jnp.diag(hp.alpha1) + (hp.alpha2 / ntasks) * jnp.ones((ntasks, ntasks))
    for alpha, kernel in zip(hp.alphaextra, kernels):
        C = C + alpha * kernel

    return C


def prior_covariance(C, ndims):
    return linalg.jnp.kron(C, linalg.jnp.eye(ndims))


def derivative_set(hp, kernels, ndims):
    """(dSigma, dHyper) pairs for every hyperparameter except the noise precision,
    in `hyp` order: dSigma = dSigma/d(alpha) and dHyper = alpha, so that
    dSigma * dHyper is the derivative with respect to log(alpha)."""

    jnp = linalg.jnp
    ntasks, nkernels = hp.alpha1.shape[0], len(kernels)
    eye = jnp.eye(ndims)

    derivatives = [None] * (ntasks + 1 + nkernels)

    for i in range(ntasks):
        unit = np.zeros((ntasks, ntasks))
        unit[i, i] = 1.0
        derivatives[i] = (jnp.kron(unit, eye), hp.alpha1[i])

    derivatives[ntasks] = (jnp.kron(np.ones((ntasks, ntasks)) / ntasks, eye), hp.alpha2)

    for k, kernel in enumerate(kernels):
        derivatives[ntasks + 1 + k] = (jnp.kron(kernel, eye), hp.alphaextra[k])

    return derivatives


def make_prior(hp, kernels, ndims, derivatives=False):
    C = coupling_matrix(hp, kernels)
    Sigma = prior_covariance(C, ndims)

    logger.debug('factoring prior covariance (%d x %d)', *Sigma.shape)
    cf = linalg.cholesky(Sigma, 'prior covariance')

    return StructuredPrior(C, Sigma, cf, linalg.cholesky_logdet(cf),
                           derivative_set(hp, kernels, ndims) if derivatives else None)
