import collections
import logging

from . import linalg
from . import hyper
from . import prior

logger = logging.getLogger(__name__)


Posterior = collections.namedtuple('Posterior', ['m', 'invA'])


def woodbury_posterior(X, t, beta, pr):
    # the posterior precision A = beta X^T X + Sigma^-1 is never formed;
    # by Woodbury
    #
    #   A^-1 = Sigma - Sigma X^T ((1/beta) I + X Sigma X^T)^-1 X Sigma
    #   |A|  = |Sigma|^-1 beta^N |(1/beta) I + X Sigma X^T|
    #
    # which only factors an N x N matrix

    jnp = linalg.jnp
    N = X.shape[0]

    v = X @ pr.Sigma

    logger.debug('factoring observation-space system (%d x %d)', N, N)
    cf = linalg.cholesky(jnp.eye(N) / beta + v @ X.T, 'observation-space system')

    invA = pr.Sigma - v.T @ linalg.cholsolve(cf, v)
    m = beta * invA @ (X.T @ t)

    logdetA = -pr.logdet + N * jnp.log(beta) + linalg.cholesky_logdet(cf)

    return Posterior(m, invA), logdetA


def fit_posterior(hyp, X, t, ntasks, ndims, kernels=(), derivatives=False):
    """Decode `hyp`, build the structured prior and compute the weight posterior.

    Expects inputs already checked by `hyper.check_inputs`. Returns the decoded
    Hyperparameters, the StructuredPrior (with its derivative set if
    `derivatives`), the Posterior and log|A|.
    """

    hp = hyper.decode(hyp, ntasks, len(kernels))
    pr = prior.make_prior(hp, kernels, ndims, derivatives=derivatives)
    post, logdetA = woodbury_posterior(X, t, hp.beta, pr)

    return hp, pr, post, logdetA
