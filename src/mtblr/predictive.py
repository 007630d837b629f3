import collections

from . import linalg


Prediction = collections.namedtuple('Prediction', ['mean', 'variance', 'posterior'])


def predictive_moments(xs, beta, post):
    # noise variance plus diag(xs invA xs^T), without the Ntest x Ntest product
    mean = xs @ post.m
    variance = 1.0 / beta + linalg.jnp.sum((xs @ post.invA) * xs, axis=1)

    return Prediction(mean, variance, post)
