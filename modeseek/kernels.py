import numpy as np

from modeseek.errors import InvalidArgumentError


class RadiallySymmetricKernel:
    """A kernel k(||x||²) defined through its profile k.

    Both profile and derivative receive squared normalized distances u² = (d / h)² and work elementwise on numpy
    arrays. The mean shift weight of a neighbor is -k'(u²), which must be finite and non-negative on the domain
    queried by the clustering engine, [0, 9].

    The engine only calls derivative; profile and weight are conveniences for inspecting a kernel. Custom kernels
    need not subclass this class, any object with a vectorized derivative method is accepted.
    """

    name = None

    def profile(self, x):
        raise NotImplementedError

    def derivative(self, x):
        raise NotImplementedError

    def weight(self, x):
        return -self.derivative(x)

    def __call__(self, x):
        return self.profile(x)

    def __repr__(self):
        return f"{type(self).__name__}()"


class UniformKernel(RadiallySymmetricKernel):
    """Flat kernel: every neighbor inside the unit normalized radius weighs the same and the rest weigh nothing.

    This is the shadow of the profile 1 - u², whose derivative is the constant -1 inside the support.
    """

    name = "uniform"

    def profile(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x <= 1, 1.0 - x, 0.0)

    def derivative(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x <= 1, -1.0, 0.0)


class GaussianKernel(RadiallySymmetricKernel):
    name = "gaussian"

    def __init__(self, sigma: float = 1.0):
        if sigma <= 0:
            raise InvalidArgumentError(f"The kernel width should be positive, got {sigma}.")
        self.sigma = sigma

    def profile(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.exp(-0.5 * x / self.sigma**2)

    def derivative(self, x):
        return -0.5 / self.sigma**2 * self.profile(x)

    def __repr__(self):
        return f"{type(self).__name__}(sigma={self.sigma})"


class EpanechnikovKernel(RadiallySymmetricKernel):
    """Epanechnikov kernel in its profile form c (1 - u²) on u² <= 1."""

    name = "epanechnikov"

    def __init__(self, constant: float = 0.75):
        if constant <= 0:
            raise InvalidArgumentError(f"The kernel constant should be positive, got {constant}.")
        self.constant = constant

    def profile(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x <= 1, self.constant * (1.0 - x), 0.0)

    def derivative(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x <= 1, -self.constant, 0.0)

    def __repr__(self):
        return f"{type(self).__name__}(constant={self.constant})"


_KERNELS = {
    "uniform": UniformKernel,
    "flat": UniformKernel,
    "gaussian": GaussianKernel,
    "epanechnikov": EpanechnikovKernel,
}


def get_kernel(kernel) -> RadiallySymmetricKernel:
    # Anything exposing a derivative of the profile can drive the mean shift.
    if isinstance(kernel, RadiallySymmetricKernel) or callable(getattr(kernel, "derivative", None)):
        return kernel
    try:
        return _KERNELS[str(kernel).lower()]()
    except KeyError:
        raise InvalidArgumentError(
            f"Unsupported kernel type: {kernel}. Please select one from: {', '.join(_KERNELS)}."
        )
