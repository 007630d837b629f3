import time
import argparse

import numpy as np
import scipy.optimize

import mtblr

parser = argparse.ArgumentParser()
parser.add_argument('-t', type=int, default=4,     help='number of tasks')
parser.add_argument('-d', type=int, default=20,    help='number of weights per task')
parser.add_argument('-n', type=int, default=10,    help='observations per task')
parser.add_argument('-s', type=int, default=42,    help='random number seed')
parser.add_argument('-k', action='store_true',     help='add a nearest-neighbor coupling kernel')
parser.add_argument('-j', action='store_true',     help='use the jax backend')
args = parser.parse_args()

class timer:
    def tic(self, s):
        self.s, self.t0 = s, time.time()

    def toc(self, n=1):
        dt = time.time() - self.t0
        if n == 1:
            print(f'{self.s}: {dt:.3f} seconds.')
        else:
            print(f'{self.s}: {dt:.3f} seconds, {dt/n:.3f} seconds/evaluation.')

clock = timer()

if args.j:
    mtblr.config(backend='jax')

ntasks, ndims, nper = args.t, args.d, args.n
rng = np.random.default_rng(args.s)

# related tasks: weights scatter around a shared mean
w0 = rng.normal(size=ndims)
w = np.concatenate([w0 + 0.3 * rng.normal(size=ndims) for i in range(ntasks)])

def simulate(nper):
    X = np.zeros((ntasks * nper, ntasks * ndims))
    for i in range(ntasks):
        X[i*nper:(i+1)*nper, i*ndims:(i+1)*ndims] = rng.normal(size=(nper, ndims))
    return X, X @ w + 0.5 * rng.normal(size=ntasks * nper)

X, t = simulate(nper)
xs, ts = simulate(5)

# tasks i and i+1 are neighbors
kernels = [np.eye(ntasks, k=1) + np.eye(ntasks, k=-1) + 2 * np.eye(ntasks)] if args.k else []

nlZ = mtblr.make_nlZ(X, t, ntasks, ndims, kernels)
hyp0 = np.zeros(len(nlZ.params))

clock.tic('Optimizing hyperparameters')
trace = [hyp0]
res = scipy.optimize.minimize(lambda hyp: tuple(map(np.asarray, nlZ(hyp))), hyp0, jac=True,
                              method='L-BFGS-B', callback=lambda hyp: trace.append(hyp.copy()))
clock.toc(res.nfev)

print(res.message)
print(mtblr.to_df(trace, ntasks, len(kernels)).tail())

pr = mtblr.predict(res.x, X, t, ntasks, ndims, kernels, xs)
rmse = np.sqrt(np.mean((np.asarray(pr.mean) - ts)**2))
print(f'nlZ = {res.fun:.3f}, test RMSE = {rmse:.3f}, mean predictive sd = {np.mean(np.sqrt(pr.variance)):.3f}')
