import numpy as np

from layerkit.core.errors import InvalidConfigurationError
from layerkit.optimizers.optimizer import Optimizer


class SGD(Optimizer):
    """確率的勾配降下法（Stochastic Gradient Descent）"""

    def __init__(self, lr: float = 0.01) -> None:
        """
        Args:
            lr: 学習率
        """
        if lr <= 0:
            raise InvalidConfigurationError(f"lr must be positive, got {lr}")
        self.lr = lr

    def update_one(self, param: np.ndarray, grad: np.ndarray) -> np.ndarray:
        return param - self.lr * grad


class MomentumSGD(Optimizer):
    """Momentum付きSGD

    速度ベクトル v を保持し、勾配の指数移動平均の方向に更新する。
    """

    def __init__(self, lr: float = 0.01, momentum: float = 0.9) -> None:
        if lr <= 0:
            raise InvalidConfigurationError(f"lr must be positive, got {lr}")
        if not 0.0 <= momentum < 1.0:
            raise InvalidConfigurationError(f"momentum must be in [0, 1), got {momentum}")
        self.lr = lr
        self.momentum = momentum
        self.v: dict[int, np.ndarray] = {}

    def update_one(self, param: np.ndarray, grad: np.ndarray) -> np.ndarray:
        param_id = id(param)
        if param_id not in self.v:
            self.v[param_id] = np.zeros_like(param)

        self.v[param_id] = self.momentum * self.v[param_id] - self.lr * grad
        return param + self.v[param_id]

    def reset(self) -> None:
        self.v.clear()
