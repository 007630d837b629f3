import collections
import logging

import numpy as np

from . import linalg
from . import hyper
from . import posterior

logger = logging.getLogger(__name__)


Evidence = collections.namedtuple('Evidence', ['nlZ', 'dnlZ', 'posterior'])


def negative_log_evidence(X, t, beta, pr, post, logdetA):
    jnp = linalg.jnp
    N, D = X.shape

    r = t - X @ post.m
    invSigma_m = linalg.cholsolve(pr.cf, post.m)

    # note the normalization uses D rather than N; it is a constant offset
    return -0.5 * (N * jnp.log(beta) - D * jnp.log(2.0 * np.pi) - pr.logdet
                   - beta * (r @ r) - post.m @ invSigma_m - logdetA)


def evidence_gradient(X, t, beta, pr, post):
    """Gradient of the negative log evidence with respect to the log-scale
    hyperparameters, in `hyp` order: the noise precision first, then one entry
    per element of the prior's derivative set."""

    jnp = linalg.jnp
    N = X.shape[0]
    m, invA = post

    XX = X.T @ X
    Xt = X.T @ t
    XXm = XX @ m
    invSigma_m = linalg.cholsolve(pr.cf, m)

    Q = invA @ X.T
    SXt = Q @ t

    # b = dm/dbeta = (I - beta Q X) Q t
    b = SXt - beta * (Q @ (X @ SXt))

    grads = [None] * (1 + len(pr.derivatives))

    grads[0] = -(N / (2.0 * beta) - 0.5 * (t @ t) + t @ (X @ m) + beta * (Xt @ b) - 0.5 * (m @ XXm)
                 - beta * (b @ XXm) - b @ invSigma_m - 0.5 * jnp.sum(Q * X.T)) * beta

    for i, (dSigma, dHyper) in enumerate(pr.derivatives):
        invSigma_dSigma = linalg.cholsolve(pr.cf, dSigma)

        # F = d(Sigma^-1) = -Sigma^-1 dSigma Sigma^-1
        F = -linalg.cholsolve(pr.cf, invSigma_dSigma.T).T

        # c = dm
        c = -beta * (invA @ (F @ SXt))

        grads[i + 1] = -(-0.5 * jnp.trace(invSigma_dSigma) + beta * (Xt @ c) - beta * (c @ XXm)
                         - c @ invSigma_m - 0.5 * (m @ F @ m) - 0.5 * jnp.sum(invA * F.T)) * dHyper

    return jnp.stack(grads)


def evidence(hyp, X, t, ntasks, ndims, kernels=(), grad=False):
    """Negative log marginal likelihood, with its gradient and the posterior if `grad`.

    Expects inputs already checked by `hyper.check_inputs`.
    """

    hp, pr, post, logdetA = posterior.fit_posterior(hyp, X, t, ntasks, ndims, kernels, derivatives=grad)

    nlZ = negative_log_evidence(X, t, hp.beta, pr, post, logdetA)

    if grad:
        return Evidence(nlZ, evidence_gradient(X, t, hp.beta, pr, post), post)
    else:
        return Evidence(nlZ, None, None)


def make_nlZ(X, t, ntasks, ndims, kernels=(), grad=True):
    """Objective for an external hyperparameter optimizer.

    The data are checked once here; the returned function maps `hyp` to
    `(nlZ, dnlZ)` (or to `nlZ` alone if not `grad`), as expected by
    `scipy.optimize.minimize(..., jac=True)`. Its `params` attribute lists
    the names of the entries of `hyp`.
    """

    X, t, kernels, _ = hyper.check_inputs(X, t, ntasks, ndims, kernels)

    if grad:
        def nlZ(hyp):
            ev = evidence(hyp, X, t, ntasks, ndims, kernels, grad=True)
            return ev.nlZ, ev.dnlZ
    else:
        def nlZ(hyp):
            return evidence(hyp, X, t, ntasks, ndims, kernels).nlZ

    nlZ.params = hyper.hypernames(ntasks, len(kernels))

    return nlZ
