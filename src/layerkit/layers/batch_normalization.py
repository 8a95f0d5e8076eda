from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from layerkit.core import Batch, Config, InvalidConfigurationError
from layerkit.initializers import Initializer
from layerkit.layers.gradients import BatchNormalizationGradients
from layerkit.layers.layer import Context, Layer, LayerKind, feature_count

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class BatchNormalizationContext(Context):
    xc: np.ndarray
    xn: np.ndarray
    std: np.ndarray


class BatchNormalization(Layer):
    """Batch Normalization層

    ミニバッチごとに入力を正規化し、学習を安定化・高速化する。
    学習時と推論時で異なる動作をする。

    学習時: ミニバッチの平均・分散で正規化し、移動平均を更新
    推論時: 学習時に記録した移動平均で正規化

    The output scales the centered input, ``gamma * xc + beta``, in both
    modes; the variance-normalized ``xn`` only feeds the gradients.
    """

    kind = LayerKind.BATCH_NORMALIZATION
    gradients_type = BatchNormalizationGradients
    context_type = BatchNormalizationContext
    requires_training_context = True

    def __init__(
        self,
        features: int | Layer,
        initializer: Initializer | None = None,
        momentum: float = 0.9,
        eps: float = 1e-6,
    ) -> None:
        """
        Args:
            features: 特徴量の数、または直前の層 (その出力数を使う)
            initializer: 他の層とインターフェースを揃えるためのもの (未使用)
            momentum: 移動平均の更新係数 [0, 1)
            eps: ゼロ除算防止のため分散に加算する値
        """
        n = feature_count(features)
        super().__init__(n, n)

        if not 0.0 <= momentum < 1.0:
            raise InvalidConfigurationError(f"momentum must be in [0, 1), got {momentum}")
        if eps <= 0:
            raise InvalidConfigurationError(f"eps must be positive, got {eps}")

        self.momentum = momentum
        self.eps = eps

        # gamma/beta は初期化関数によらず 1 と 0 で固定
        self.gamma = np.ones(n, dtype=Config.dtype)
        self.beta = np.zeros(n, dtype=Config.dtype)

        # 推論時に使用する移動平均
        self.means = np.zeros(n, dtype=Config.dtype)
        self.variances = np.zeros(n, dtype=Config.dtype)

        logger.debug("created %r with momentum=%s eps=%s", self, momentum, eps)

    def __repr__(self) -> str:
        return f"BatchNormalization(features={self.inputs}, momentum={self.momentum})"

    def parameters(self) -> dict[str, np.ndarray]:
        return {"gamma": self.gamma, "beta": self.beta}

    def _forward(self, x: Batch, training: bool) -> tuple[Batch, BatchNormalizationContext]:
        data = x.data

        if training:
            # 学習時: ミニバッチの統計量で正規化
            mu = data.mean(axis=0)
            xc = data - mu
            var = np.mean(xc**2, axis=0)
            std = np.sqrt(var + self.eps)
            xn = xc / std

            # 移動平均を更新
            with self._lock:
                self.means[...] = self.momentum * self.means + (1 - self.momentum) * mu
                self.variances[...] = self.momentum * self.variances + (1 - self.momentum) * var
            logger.debug("%r updated running statistics from %d samples", self, x.size)
        else:
            # 推論時: 移動平均で正規化
            xc = data - self.means
            std = np.sqrt(self.variances + self.eps)
            xn = xc / std

        out = self.gamma * xc + self.beta

        context = BatchNormalizationContext(
            owner=self, size=x.size, training=training, xc=xc, xn=xn, std=std
        )
        return Batch.from_array(out), context

    def _backward(
        self, x: Batch, y: Batch, d: Batch, context: BatchNormalizationContext
    ) -> tuple[Batch, BatchNormalizationGradients]:
        dout = d.data
        xc, xn, std = context.xc, context.xn, context.std
        batch_size = context.size

        # パラメータの勾配
        dbeta = dout.sum(axis=0)
        dgamma = np.sum(xn * dout, axis=0)

        # 正規化の逆伝播
        dxn = self.gamma * dout
        dxc = dxn / std
        dstd = -np.sum((dxn * xc) / (std * std), axis=0)
        dvar = 0.5 * dstd / std
        dxc += (2.0 / batch_size) * xc * dvar
        dmu = np.sum(dxc, axis=0)
        dx = dxc - dmu / batch_size

        grads = BatchNormalizationGradients(scale_gradient=dgamma, shift_gradient=dbeta)
        return Batch.from_array(dx), grads
