import contextlib

import numpy as np


@contextlib.contextmanager
def use_config(name: str, value: object):
    old_value = getattr(Config, name)
    setattr(Config, name, value)
    try:
        yield
    finally:
        setattr(Config, name, old_value)


class Config:
    train = True
    dtype = np.float64


def test_mode():
    return use_config("train", False)


def resolve_training(is_training: bool | None) -> bool:
    if is_training is None:
        return bool(Config.train)
    return is_training
