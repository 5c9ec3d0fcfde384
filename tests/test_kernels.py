import numpy as np
import pytest

from modeseek import EpanechnikovKernel, GaussianKernel, InvalidArgumentError, UniformKernel, get_kernel

DOMAIN = np.linspace(0, 9, 91)


@pytest.mark.parametrize("kernel", [UniformKernel(), GaussianKernel(), EpanechnikovKernel()])
def test_weights_are_finite_and_non_negative_on_the_queried_domain(kernel):
    weights = kernel.weight(DOMAIN)

    assert weights.shape == DOMAIN.shape
    assert np.all(np.isfinite(weights))
    assert np.all(weights >= 0)
    assert weights[0] > 0


def test_uniform_kernel_is_flat_inside_its_support():
    kernel = UniformKernel()

    np.testing.assert_array_equal(kernel.weight([0.0, 0.3, 1.0, 1.01, 4.0]), [1, 1, 1, 0, 0])


def test_gaussian_derivative_matches_finite_differences():
    kernel = GaussianKernel(sigma=1.3)
    x = np.linspace(0.1, 8, 20)
    eps = 1e-6

    numerical = (kernel.profile(x + eps) - kernel.profile(x - eps)) / (2 * eps)

    np.testing.assert_allclose(kernel.derivative(x), numerical, rtol=1e-6)


def test_epanechnikov_derivative_matches_finite_differences_inside_support():
    kernel = EpanechnikovKernel()
    x = np.linspace(0.1, 0.9, 9)
    eps = 1e-6

    numerical = (kernel.profile(x + eps) - kernel.profile(x - eps)) / (2 * eps)

    np.testing.assert_allclose(kernel.derivative(x), numerical, rtol=1e-6)


def test_get_kernel():
    assert isinstance(get_kernel("gaussian"), GaussianKernel)
    assert isinstance(get_kernel("FLAT"), UniformKernel)
    kernel = EpanechnikovKernel(constant=2.0)
    assert get_kernel(kernel) is kernel


def test_get_kernel_accepts_any_object_with_a_derivative():
    class Triweight:
        def derivative(self, x):
            x = np.asarray(x)
            return np.where(x <= 1, -3 * (1 - x) ** 2, 0.0)

    kernel = Triweight()
    assert get_kernel(kernel) is kernel


def test_unknown_kernel():
    with pytest.raises(InvalidArgumentError, match="Unsupported kernel type"):
        get_kernel("cosine")


def test_invalid_kernel_parameters():
    with pytest.raises(InvalidArgumentError):
        GaussianKernel(sigma=0)
    with pytest.raises(InvalidArgumentError):
        EpanechnikovKernel(constant=-1)
