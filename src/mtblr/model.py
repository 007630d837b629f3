import logging

from . import hyper
from . import likelihood
from . import posterior
from . import predictive
from .errors import ArgumentCountError

logger = logging.getLogger(__name__)


def fit_evidence(hyp, X, t, ntasks, ndims, kernels=(), grad=False):
    """Evidence mode.

    Args:
        hyp:     log-scale hyperparameters, length 2 + ntasks + len(kernels)
        X:       N x (ntasks * ndims) design matrix, columns grouped by task
        t:       N targets
        ntasks:  number of tasks
        ndims:   number of weights per task
        kernels: extra ntasks x ntasks coupling kernels
        grad:    also compute the gradient and return the posterior

    Returns:
        Evidence: (nlZ, dnlZ, posterior); dnlZ and posterior are None unless grad
    """

    X, t, kernels, _ = hyper.check_inputs(X, t, ntasks, ndims, kernels)
    logger.debug('evidence for N=%d, ntasks=%d, ndims=%d, %d extra kernels%s',
                 X.shape[0], ntasks, ndims, len(kernels), ' with gradient' if grad else '')

    return likelihood.evidence(hyp, X, t, ntasks, ndims, kernels, grad=grad)


def predict(hyp, X, t, ntasks, ndims, kernels, xs):
    """Prediction mode: posterior-predictive mean and variance at the rows of `xs`.

    Returns:
        Prediction: (mean, variance, posterior)
    """

    X, t, kernels, xs = hyper.check_inputs(X, t, ntasks, ndims, kernels, xs)
    logger.debug('prediction at %d test inputs from N=%d', xs.shape[0], X.shape[0])

    hp, _, post, _ = posterior.fit_posterior(hyp, X, t, ntasks, ndims, kernels)

    return predictive.predictive_moments(xs, hp.beta, post)


usage = ('Usage: blr(hyp, X, t, ntasks, ndims, kernels)      -> Evidence(nlZ, dnlZ, posterior)\n'
         '   or: blr(hyp, X, t, ntasks, ndims, kernels, xs)  -> Prediction(mean, variance, posterior)')

def blr(*args, grad=True):
    """Dispatch on the call shape: six arguments select evidence mode,
    seven (with test inputs `xs`) select prediction mode.

    Unlike `fit_evidence`, evidence mode here computes the gradient and the
    posterior by default; pass `grad=False` for nlZ alone."""

    if len(args) == 6:
        return fit_evidence(*args, grad=grad)
    elif len(args) == 7:
        return predict(*args)
    else:
        raise ArgumentCountError(f'blr takes 6 or 7 positional arguments, got {len(args)}.\n{usage}')
