import numpy as np


def _result(y: np.ndarray):
    # scalar in, scalar out
    if np.ndim(y) == 0:
        return float(y)
    return y


class ActivationFunction:
    """Stateless scalar function and derivative pair.

    Both methods are pure and work elementwise, so they accept either a
    Python scalar or a numpy array.
    """

    def function(self, x):
        raise NotImplementedError()

    def derivative(self, x):
        raise NotImplementedError()

    def __call__(self, x):
        return self.function(x)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Identity(ActivationFunction):
    def function(self, x):
        return _result(np.asarray(x, dtype=float))

    def derivative(self, x):
        return _result(np.ones_like(np.asarray(x, dtype=float)))


class Sigmoid(ActivationFunction):
    def function(self, x):
        x = np.asarray(x, dtype=float)
        return _result(1 / (1 + np.exp(-x)))

    def derivative(self, x):
        y = np.asarray(self.function(x))
        return _result(y * (1 - y))


class Tanh(ActivationFunction):
    def function(self, x):
        return _result(np.tanh(np.asarray(x, dtype=float)))

    def derivative(self, x):
        y = np.tanh(np.asarray(x, dtype=float))
        return _result(1 - y * y)


class ReLU(ActivationFunction):
    def function(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x > 0, x, 0.0))

    def derivative(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x > 0, 1.0, 0.0))


class LeakyReLU(ActivationFunction):
    def __init__(self, slope: float = 0.01) -> None:
        self.slope = slope

    def function(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x >= 0, x, self.slope * x))

    def derivative(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x >= 0, 1.0, self.slope))

    def __repr__(self) -> str:
        return f"LeakyReLU(slope={self.slope})"


class ELU(ActivationFunction):
    def __init__(self, alpha: float = 1.0) -> None:
        self.alpha = alpha

    def function(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x >= 0, x, self.alpha * np.expm1(np.minimum(x, 0))))

    def derivative(self, x):
        x = np.asarray(x, dtype=float)
        return _result(np.where(x >= 0, 1.0, self.alpha * np.exp(np.minimum(x, 0))))

    def __repr__(self) -> str:
        return f"ELU(alpha={self.alpha})"


class SELU(ActivationFunction):
    """Scaled exponential linear unit.

    Args:
        alpha: saturation constant for negative inputs
        scale: output scale applied to both branches
    """

    def __init__(
        self, alpha: float = 1.6732632423543772, scale: float = 1.0507009873554805
    ) -> None:
        self.alpha = alpha
        self.scale = scale

    def function(self, x):
        x = np.asarray(x, dtype=float)
        negative = self.scale * self.alpha * (np.exp(np.minimum(x, 0)) - 1.0)
        return _result(np.where(x >= 0, self.scale * x, negative))

    def derivative(self, x):
        x = np.asarray(x, dtype=float)
        negative = self.scale * self.alpha * np.exp(np.minimum(x, 0))
        return _result(np.where(x >= 0, self.scale, negative))

    def __repr__(self) -> str:
        return f"SELU(alpha={self.alpha}, scale={self.scale})"
