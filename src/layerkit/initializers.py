import numpy as np
from typing import Callable

Initializer = Callable[[int, int, int], float]


def constant(value: float = 0.0) -> Initializer:
    """定数による重み初期化"""

    def init(input_index: int, output_index: int, total_size: int) -> float:
        return value

    return init


def normal(std: float = 0.01) -> Initializer:
    """正規分布による重み初期化

    Args:
        std: 標準偏差

    Returns:
        重み初期化関数
    """

    def init(input_index: int, output_index: int, total_size: int) -> float:
        return std * np.random.randn()

    return init


def uniform(low: float = -0.05, high: float = 0.05) -> Initializer:
    def init(input_index: int, output_index: int, total_size: int) -> float:
        return np.random.uniform(low, high)

    return init


def xavier() -> Initializer:
    """Xavier初期化（Glorot初期化）

    活性化関数がtanhやsigmoidの場合に有効。
    分散が入力ノード数に依存するように初期化する。

    Returns:
        重み初期化関数
    """

    def init(input_index: int, output_index: int, total_size: int) -> float:
        return np.random.randn() / np.sqrt(total_size)

    return init


def he() -> Initializer:
    """He初期化

    活性化関数がReLUの場合に有効。
    Xavier初期化の2倍の分散を持つ。

    Returns:
        重み初期化関数
    """

    def init(input_index: int, output_index: int, total_size: int) -> float:
        return np.random.randn() * np.sqrt(2.0 / total_size)

    return init


def initialize(func: Initializer, n_in: int, n_out: int, dtype=np.float64) -> np.ndarray:
    """Evaluate an initializer over an (n_in, n_out) weight matrix.

    ``total_size`` passed to the initializer is the fan-in ``n_in``.
    """
    W = np.empty((n_in, n_out), dtype=dtype)
    for i in range(n_in):
        for j in range(n_out):
            W[i, j] = func(i, j, n_in)
    return W
