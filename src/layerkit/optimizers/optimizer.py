from typing import Callable

import numpy as np

UpdateRule = Callable[[float, float], float]


class Optimizer:
    """Per-parameter update rule with optional internal state.

    ``update_one`` receives one parameter array and its gradient and returns
    the new values. Layers write the result back into the same array, so
    ``id(param)`` is a stable key for state such as moments.
    """

    def update_one(self, param: np.ndarray, grad: np.ndarray) -> np.ndarray:
        raise NotImplementedError()

    def reset(self) -> None:
        pass

    def __call__(self, param, grad):
        return self.update_one(np.asarray(param, dtype=float), np.asarray(grad, dtype=float))


class FunctionRule(Optimizer):
    """Wraps a bare ``(param, grad) -> new_param`` callable.

    The callable is applied elementwise, one scalar pair at a time.
    """

    def __init__(self, func: UpdateRule) -> None:
        self.func = func
        self._vectorized = np.vectorize(func, otypes=[float])

    def update_one(self, param: np.ndarray, grad: np.ndarray) -> np.ndarray:
        return self._vectorized(param, grad)


def as_optimizer(obj: "Optimizer | UpdateRule") -> Optimizer:
    if isinstance(obj, Optimizer):
        return obj
    if callable(obj):
        return FunctionRule(obj)
    raise TypeError(f"{type(obj)} is not an optimizer or update rule.")
