from timeit import default_timer as timer

import numpy as np
import typer
from sklearn.cluster import MeanShift as SklearnMeanShift
from sklearn.datasets import make_blobs
from sklearn.metrics import adjusted_rand_score

from modeseek import MeanShift


def time_function_call(f, *args, **kwargs):
    start = timer()
    result = f(*args, **kwargs)
    end = timer()
    return result, end - start


def main(
        n_samples: int = 2000,
        n_centers: int = 5,
        n_features: int = 2,
        cluster_std: float = 0.6,
        bandwidth: float = 1.5,
        kernel: str = 'gaussian',
        bin_seeding: bool = True,
        n_jobs: int = -1,
        seed: int = 42,
        verbose: bool = False
):
    data, targets = make_blobs(
        n_samples=n_samples,
        centers=n_centers,
        n_features=n_features,
        cluster_std=cluster_std,
        center_box=(-10 * n_centers, 10 * n_centers),
        random_state=seed
    )
    print(f'Clustering {n_samples} points of dimension {n_features} around {n_centers} centers...')

    runs = {
        'modeseek (serial)': MeanShift(
            bandwidth=bandwidth, kernel=kernel, bin_seeding=bin_seeding, n_jobs=1, verbose=verbose),
        f'modeseek (n_jobs={n_jobs})': MeanShift(
            bandwidth=bandwidth, kernel=kernel, bin_seeding=bin_seeding, n_jobs=n_jobs, verbose=verbose),
        'scikit-learn': SklearnMeanShift(bandwidth=bandwidth, bin_seeding=bin_seeding, n_jobs=n_jobs),
    }

    labels_per_run = {}
    for name, estimator in runs.items():
        labels, seconds = time_function_call(estimator.fit_predict, data)
        labels_per_run[name] = labels
        print(
            f'{name}: {len(np.unique(labels))} clusters in {seconds:.2f}s, '
            f'ARI {adjusted_rand_score(targets, labels):.4f}'
        )

    serial, parallel = list(labels_per_run.values())[:2]
    if not np.array_equal(serial, parallel):
        print('Warning: the serial and the parallel runs disagree.')


if __name__ == '__main__':
    typer.run(main)
