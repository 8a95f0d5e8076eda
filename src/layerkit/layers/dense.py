from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from layerkit.activations import ActivationFunction, Identity
from layerkit.core import Batch, Config
from layerkit.initializers import Initializer, initialize, normal
from layerkit.layers.gradients import DenseGradients
from layerkit.layers.layer import Context, Layer, LayerKind

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class DenseContext(Context):
    x: np.ndarray
    z: np.ndarray


class Dense(Layer):
    """Fully connected layer ``y = activation(x W + b)``."""

    kind = LayerKind.DENSE
    gradients_type = DenseGradients
    context_type = DenseContext

    def __init__(
        self,
        inputs: int | Layer,
        outputs: int,
        initializer: Initializer | None = None,
        activation: ActivationFunction | None = None,
    ) -> None:
        super().__init__(inputs, outputs)
        self.activation = activation or Identity()

        self.W = initialize(initializer or normal(), self.inputs, self.outputs, dtype=Config.dtype)
        self.b = np.zeros(self.outputs, dtype=Config.dtype)

        logger.debug("created %r with activation %r", self, self.activation)

    def parameters(self) -> dict[str, np.ndarray]:
        return {"W": self.W, "b": self.b}

    def _forward(self, x: Batch, training: bool) -> tuple[Batch, DenseContext]:
        z = np.dot(x.data, self.W) + self.b
        out = np.asarray(self.activation.function(z))

        context = DenseContext(
            owner=self, size=x.size, training=training, x=x.data.copy(), z=z
        )
        return Batch.from_array(out), context

    def _backward(
        self, x: Batch, y: Batch, d: Batch, context: DenseContext
    ) -> tuple[Batch, DenseGradients]:
        dz = d.data * self.activation.derivative(context.z)

        dx = np.dot(dz, self.W.T)
        dW = np.dot(context.x.T, dz)
        db = np.sum(dz, axis=0)

        return Batch.from_array(dx), DenseGradients(weight_gradient=dW, bias_gradient=db)
