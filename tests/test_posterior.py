"""Tests for the observation-space posterior and the Cholesky primitives"""

import numpy as np
import pytest

import mtblr

from conftest import make_problem


def direct_posterior(hyp, X, t, ntasks, ndims, kernels):
    # weight-space reference: A = beta X^T X + Sigma^-1
    hp = mtblr.decode(hyp, ntasks, len(kernels))
    Sigma = np.kron(mtblr.coupling_matrix(hp, kernels), np.eye(ndims))

    A = hp.beta * X.T @ X + np.linalg.inv(Sigma)
    invA = np.linalg.inv(A)

    return hp.beta * invA @ X.T @ t, invA, A


class TestCholesky:
    def test_solve_and_logdet(self):
        rng = np.random.default_rng(3)
        B = rng.normal(size=(6, 6))
        M = B @ B.T + 6 * np.eye(6)
        y = rng.normal(size=6)

        cf = mtblr.cholesky(M, 'test matrix')

        assert np.allclose(mtblr.cholsolve(cf, y), np.linalg.solve(M, y))
        assert np.isclose(mtblr.cholesky_logdet(cf), np.sum(np.log(np.linalg.eigvalsh(M))))

    def test_failure_names_the_matrix(self):
        with pytest.raises(mtblr.NotPositiveDefinite, match='test matrix') as excinfo:
            mtblr.cholesky(np.diag([1.0, -1.0]), 'test matrix')

        assert excinfo.value.which == 'test matrix'

    def test_nonfinite(self):
        with pytest.raises(mtblr.NumericalError):
            mtblr.cholesky(np.array([[np.inf, 0.0], [0.0, 1.0]]), 'test matrix')


class TestPosterior:
    @pytest.mark.parametrize('nobs', [5, 8, 30])
    def test_matches_weight_space(self, nobs):
        p = make_problem(nobs=nobs)
        _, _, post, _ = mtblr.fit_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])
        m, invA, _ = direct_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])

        assert np.allclose(post.m, m)
        assert np.allclose(post.invA, invA)

    def test_logdet(self, problem):
        p = problem
        _, _, _, logdetA = mtblr.fit_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])
        _, _, A = direct_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])

        assert np.isclose(logdetA, np.sum(np.log(np.linalg.eigvalsh(A))))

    def test_invA_symmetric_psd(self, problem):
        p = problem
        _, _, post, _ = mtblr.fit_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])

        assert np.allclose(post.invA, post.invA.T)
        assert np.linalg.eigvalsh(0.5 * (post.invA + post.invA.T)).min() > -1e-10

    def test_prior_derivatives_only_on_request(self, problem):
        p = problem
        _, pr, _, _ = mtblr.fit_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'])
        assert pr.derivatives is None

        _, pr, _, _ = mtblr.fit_posterior(p['hyp'], p['X'], p['t'], p['ntasks'], p['ndims'], p['kernels'],
                                          derivatives=True)
        assert len(pr.derivatives) == p['ntasks'] + 1 + len(p['kernels'])
