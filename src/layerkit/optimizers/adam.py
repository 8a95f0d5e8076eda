import numpy as np

from layerkit.core.errors import InvalidConfigurationError
from layerkit.optimizers.optimizer import Optimizer


class Adam(Optimizer):
    """Adam (Adaptive Moment Estimation)

    Adam は、各パラメータの適応的な学習率を計算する最適化アルゴリズム。
    勾配の1次モーメント（平均）と2次モーメント（非中心分散）の推定値を使用する。
    """

    def __init__(
        self,
        lr: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
    ) -> None:
        """
        Args:
            lr: 学習率
            beta1: 1次モーメント推定の減衰率
            beta2: 2次モーメント推定の減衰率
            eps: ゼロ除算を防ぐための小さな値
        """
        if lr <= 0:
            raise InvalidConfigurationError(f"lr must be positive, got {lr}")
        for name, beta in (("beta1", beta1), ("beta2", beta2)):
            if not 0.0 <= beta < 1.0:
                raise InvalidConfigurationError(f"{name} must be in [0, 1), got {beta}")

        self.lr = lr
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.m: dict[int, np.ndarray] = {}  # 1次モーメント
        self.v: dict[int, np.ndarray] = {}  # 2次モーメント
        self.t: dict[int, int] = {}  # パラメータごとのタイムステップ

    def update_one(self, param: np.ndarray, grad: np.ndarray) -> np.ndarray:
        param_id = id(param)

        # 初回の場合、モーメントとタイムステップを初期化
        if param_id not in self.m:
            self.m[param_id] = np.zeros_like(param)
            self.v[param_id] = np.zeros_like(param)
            self.t[param_id] = 0

        self.t[param_id] += 1

        # 1次モーメント (momentum) の更新
        self.m[param_id] = self.beta1 * self.m[param_id] + (1 - self.beta1) * grad

        # 2次モーメント (RMSprop) の更新
        self.v[param_id] = self.beta2 * self.v[param_id] + (1 - self.beta2) * (grad**2)

        # バイアス補正
        m_hat = self.m[param_id] / (1 - self.beta1 ** self.t[param_id])
        v_hat = self.v[param_id] / (1 - self.beta2 ** self.t[param_id])

        return param - self.lr * m_hat / (np.sqrt(v_hat) + self.eps)

    def reset(self) -> None:
        self.m.clear()
        self.v.clear()
        self.t.clear()
