from dataclasses import dataclass

import numpy as np


class ParameterGradients:
    """Gradients of the loss with respect to a layer's learnable parameters."""

    def by_parameter(self) -> dict[str, np.ndarray]:
        raise NotImplementedError()

    @classmethod
    def from_parameters(cls, grads: dict[str, np.ndarray]) -> "ParameterGradients":
        raise NotImplementedError()


@dataclass(frozen=True)
class BatchNormalizationGradients(ParameterGradients):
    scale_gradient: np.ndarray
    shift_gradient: np.ndarray

    def by_parameter(self) -> dict[str, np.ndarray]:
        return {"gamma": self.scale_gradient, "beta": self.shift_gradient}

    @classmethod
    def from_parameters(cls, grads: dict[str, np.ndarray]) -> "BatchNormalizationGradients":
        return cls(scale_gradient=grads["gamma"], shift_gradient=grads["beta"])


@dataclass(frozen=True)
class DenseGradients(ParameterGradients):
    weight_gradient: np.ndarray
    bias_gradient: np.ndarray

    def by_parameter(self) -> dict[str, np.ndarray]:
        return {"W": self.weight_gradient, "b": self.bias_gradient}

    @classmethod
    def from_parameters(cls, grads: dict[str, np.ndarray]) -> "DenseGradients":
        return cls(weight_gradient=grads["W"], bias_gradient=grads["b"])


@dataclass(frozen=True)
class NoGradients(ParameterGradients):
    def by_parameter(self) -> dict[str, np.ndarray]:
        return {}

    @classmethod
    def from_parameters(cls, grads: dict[str, np.ndarray]) -> "NoGradients":
        return cls()
