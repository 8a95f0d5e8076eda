from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from layerkit.core import (
    Batch,
    InvalidConfigurationError,
    ShapeMismatchError,
    StateError,
    as_batch,
    resolve_training,
)
from layerkit.layers.gradients import ParameterGradients
from layerkit.optimizers import Optimizer, UpdateRule, as_optimizer

logger = logging.getLogger(__name__)


class LayerKind(enum.Enum):
    DENSE = "dense"
    BATCH_NORMALIZATION = "batch_normalization"
    ACTIVATION = "activation"


@dataclass(eq=False)
class Context:
    """Intermediates of one forward call, consumed by one backward call."""

    owner: Layer
    size: int
    training: bool
    consumed: bool = field(default=False, init=False, repr=False)


def feature_count(value: int | Layer, name: str = "features") -> int:
    """Resolve a feature count given either as an int or a preceding layer."""
    if isinstance(value, Layer):
        return value.outputs
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfigurationError(f"{name} must be an int or a Layer, got {type(value)}")
    if value <= 0:
        raise InvalidConfigurationError(f"{name} must be positive, got {value}")
    return int(value)


class Layer:
    """Trainable layer with fixed input and output feature counts.

    A training step calls ``forward``, then ``backward`` with the context
    ``forward`` returned, then ``update`` with the resulting gradients.
    """

    kind: LayerKind
    gradients_type: type[ParameterGradients]
    context_type: type[Context] = Context
    requires_training_context = False

    def __init__(self, inputs: int | Layer, outputs: int | Layer) -> None:
        self.inputs = feature_count(inputs, "inputs")
        self.outputs = feature_count(outputs, "outputs")
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(inputs={self.inputs}, outputs={self.outputs})"

    def parameters(self) -> dict[str, np.ndarray]:
        return {}

    def forward(self, inputs, is_training: bool | None = None) -> tuple[Batch, Context]:
        """順伝播

        Args:
            inputs: 入力 (batch_size, inputs)
            is_training: 学習時はTrue、推論時はFalse。Noneなら Config.train に従う

        Returns:
            出力 (batch_size, outputs) と backward 用のコンテキスト
        """
        x = as_batch(inputs)
        x.require_features(self.inputs, "inputs")
        if x.size == 0:
            raise ShapeMismatchError("inputs must contain at least one sample")

        return self._forward(x, resolve_training(is_training))

    def backward(self, inputs, outputs, deltas, context: Context | None) -> tuple[Batch, ParameterGradients]:
        """逆伝播

        Args:
            inputs: forward に渡した入力
            outputs: forward が返した出力
            deltas: 出力側から伝わってきた勾配 (batch_size, outputs)
            context: 対応する forward が返したコンテキスト

        Returns:
            入力側への勾配とパラメータの勾配
        """
        x, y, d = as_batch(inputs), as_batch(outputs), as_batch(deltas)
        x.require_features(self.inputs, "inputs")
        y.require_features(self.outputs, "outputs")
        d.require_features(self.outputs, "deltas")
        y.require_size(x.size, "outputs")
        d.require_size(x.size, "deltas")

        return self._backward(x, y, d, self._claim(context, x.size))

    def update(
        self,
        gradients: ParameterGradients | Sequence[ParameterGradients] | Batch,
        optimizer: Optimizer | UpdateRule,
    ) -> None:
        """Apply an update rule to every learnable parameter in place.

        ``gradients`` may be one gradient structure, a sequence of them, or a
        packed batch with one gradient row per sample. Multiple entries are
        applied sequentially in order. Parameters are left untouched when
        the rule raises.
        """
        rule = as_optimizer(optimizer)
        steps = self._gradient_steps(gradients)

        with self._lock:
            params = self.parameters()
            snapshot = {name: param.copy() for name, param in params.items()}
            try:
                for grads in steps:
                    new_values = {
                        name: rule.update_one(params[name], grad)
                        for name, grad in grads.by_parameter().items()
                    }
                    for name, value in new_values.items():
                        params[name][...] = value
            except Exception:
                for name, value in snapshot.items():
                    params[name][...] = value
                raise

        logger.debug("%r applied %d update step(s) with %r", self, len(steps), rule)

    def pack_gradients(self, gradients: ParameterGradients) -> Batch:
        """Flatten a gradient structure into a single-row batch."""
        self._check_gradients(gradients)
        row = [np.ravel(grad) for grad in gradients.by_parameter().values()]
        if not row:
            raise InvalidConfigurationError(f"{self!r} has no parameters to pack")
        return Batch.from_array(np.concatenate(row)[np.newaxis, :])

    def unpack_gradients(self, row) -> ParameterGradients:
        """Split one packed gradient row back into a named structure."""
        row = np.asarray(row, dtype=float)
        params = self.parameters()
        expected = sum(param.size for param in params.values())
        if row.shape != (expected,):
            raise ShapeMismatchError(
                f"packed gradient row must have shape ({expected},), got {row.shape}"
            )

        grads = {}
        offset = 0
        for name, param in params.items():
            grads[name] = row[offset : offset + param.size].reshape(param.shape)
            offset += param.size
        return self.gradients_type.from_parameters(grads)

    def _forward(self, x: Batch, training: bool) -> tuple[Batch, Context]:
        raise NotImplementedError()

    def _backward(self, x: Batch, y: Batch, d: Batch, context: Context) -> tuple[Batch, ParameterGradients]:
        raise NotImplementedError()

    def _claim(self, context: Context | None, size: int) -> Context:
        if context is None:
            raise StateError(f"{self!r}: backward called without a forward context")
        if not isinstance(context, self.context_type) or context.owner is not self:
            raise StateError(f"{self!r}: context was produced by a different layer")
        if context.size != size:
            raise StateError(
                f"{self!r}: context holds {context.size} samples, backward got {size}"
            )
        if self.requires_training_context and not context.training:
            raise StateError(f"{self!r}: backward requires a training-mode forward")

        with self._lock:
            if context.consumed:
                raise StateError(f"{self!r}: context was already consumed by backward")
            context.consumed = True
        return context

    def _gradient_steps(self, gradients) -> list[ParameterGradients]:
        if isinstance(gradients, ParameterGradients):
            steps = [gradients]
        elif isinstance(gradients, Batch):
            steps = [self.unpack_gradients(row) for row in gradients]
        elif isinstance(gradients, (list, tuple)):
            steps = list(gradients)
        else:
            raise InvalidConfigurationError(f"{type(gradients)} is not a gradient structure")

        for grads in steps:
            self._check_gradients(grads)
        return steps

    def _check_gradients(self, grads) -> None:
        if not isinstance(grads, self.gradients_type):
            raise InvalidConfigurationError(
                f"{self!r} expects {self.gradients_type.__name__}, got {type(grads).__name__}"
            )

        params = self.parameters()
        for name, grad in grads.by_parameter().items():
            if np.shape(grad) != params[name].shape:
                raise ShapeMismatchError(
                    f"gradient for {name} has shape {np.shape(grad)}, "
                    f"expected {params[name].shape}"
                )
