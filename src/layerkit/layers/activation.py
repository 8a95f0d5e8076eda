from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from layerkit.activations import ActivationFunction
from layerkit.core import Batch
from layerkit.layers.gradients import NoGradients
from layerkit.layers.layer import Context, Layer, LayerKind, feature_count


@dataclass(eq=False)
class ActivationContext(Context):
    x: np.ndarray


class Activation(Layer):
    """Applies an activation function elementwise. Has no parameters."""

    kind = LayerKind.ACTIVATION
    gradients_type = NoGradients
    context_type = ActivationContext

    def __init__(self, features: int | Layer, function: ActivationFunction) -> None:
        n = feature_count(features)
        super().__init__(n, n)
        self.function = function

    def __repr__(self) -> str:
        return f"Activation(features={self.inputs}, function={self.function!r})"

    def _forward(self, x: Batch, training: bool) -> tuple[Batch, ActivationContext]:
        out = np.asarray(self.function.function(x.data))
        return Batch.from_array(out), ActivationContext(
            owner=self, size=x.size, training=training, x=x.data.copy()
        )

    def _backward(
        self, x: Batch, y: Batch, d: Batch, context: ActivationContext
    ) -> tuple[Batch, NoGradients]:
        dx = d.data * self.function.derivative(context.x)
        return Batch.from_array(dx), NoGradients()
