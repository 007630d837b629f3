import numpy as np
import pytest

import mtblr


def make_problem(ntasks=3, ndims=4, nobs=8, nkernels=2, ntest=5, seed=42):
    rng = np.random.default_rng(seed)

    D = ntasks * ndims

    # each observation belongs to one task and only sees that task's block of weights
    task = np.arange(nobs) % ntasks
    X = np.zeros((nobs, D))
    for n, i in enumerate(task):
        X[n, i*ndims:(i+1)*ndims] = rng.normal(size=ndims)
    t = rng.normal(size=nobs)

    xs = np.zeros((ntest, D))
    for n in range(ntest):
        i = n % ntasks
        xs[n, i*ndims:(i+1)*ndims] = rng.normal(size=ndims)

    kernels = []
    for k in range(nkernels):
        B = rng.normal(size=(ntasks, 2))
        kernels.append(B @ B.T / ntasks)

    hyp = 0.5 * rng.normal(size=mtblr.nhyper(ntasks, nkernels))

    return dict(hyp=hyp, X=X, t=t, ntasks=ntasks, ndims=ndims, kernels=kernels, xs=xs)


@pytest.fixture
def problem():
    return make_problem()


@pytest.fixture
def jax_backend():
    mtblr.config(backend='jax')
    yield
    mtblr.config(backend='numpy')
