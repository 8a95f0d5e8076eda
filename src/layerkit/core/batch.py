from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np

from layerkit.core.config import Config
from layerkit.core.errors import ShapeMismatchError


class Batch:
    """Fixed-size ordered collection of per-sample feature vectors.

    The samples are stored as the rows of a 2-D array of shape
    ``(size, features)``. A batch never resizes itself: writing a sample of
    the wrong length raises ``ShapeMismatchError``.
    """

    __array_priority__ = 200

    def __init__(self, size: int, features: int, dtype=None) -> None:
        if size < 0:
            raise ShapeMismatchError(f"batch size must be non-negative, got {size}")
        if features < 1:
            raise ShapeMismatchError(f"feature count must be positive, got {features}")

        self.data: np.ndarray = np.zeros((size, features), dtype=dtype or Config.dtype)

    @classmethod
    def from_array(cls, array) -> Batch:
        """Wrap a copy of a 2-D array-like; the caller's array is never aliased."""
        try:
            data = np.array(array, copy=True)
        except ValueError as e:
            raise ShapeMismatchError(f"batch samples have differing lengths: {e}") from e
        if data.dtype == object:
            raise ShapeMismatchError("batch samples have differing lengths")
        if data.ndim != 2:
            raise ShapeMismatchError(
                f"batch data must be 2-D (size, features), got shape {data.shape}"
            )
        if data.shape[1] < 1:
            raise ShapeMismatchError("feature count must be positive, got 0")

        if not np.issubdtype(data.dtype, np.floating):
            data = data.astype(Config.dtype)

        batch = cls.__new__(cls)
        batch.data = data
        return batch

    @classmethod
    def from_samples(cls, samples: Sequence) -> Batch:
        vectors = [np.asarray(sample, dtype=Config.dtype) for sample in samples]
        if not vectors:
            raise ShapeMismatchError("cannot infer the feature count of an empty batch")

        for i, vector in enumerate(vectors):
            if vector.ndim != 1:
                raise ShapeMismatchError(
                    f"sample {i} must be a 1-D vector, got shape {vector.shape}"
                )
            if len(vector) != len(vectors[0]):
                raise ShapeMismatchError(
                    f"sample {i} has {len(vector)} features, "
                    f"expected {len(vectors[0])} like sample 0"
                )

        return cls.from_array(np.stack(vectors))

    @property
    def size(self) -> int:
        return self.data.shape[0]

    @property
    def features(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.size, self.features

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: int) -> np.ndarray:
        return self.data[index]

    def __setitem__(self, index: int, sample) -> None:
        vector = np.asarray(sample)
        if vector.shape != (self.features,):
            raise ShapeMismatchError(
                f"sample must have shape ({self.features},), got {vector.shape}"
            )
        self.data[index] = vector

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.data)

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        data = self.data if dtype is None else self.data.astype(dtype, copy=False)
        if data is self.data:
            if copy:
                data = data.copy()
        elif copy is False:
            raise ValueError(f"converting a batch to {dtype} requires a copy")
        return data

    def __repr__(self) -> str:
        return f"Batch(size={self.size}, features={self.features})"

    def copy(self) -> Batch:
        return Batch.from_array(self.data.copy())

    def require_features(self, expected: int, name: str = "batch") -> None:
        if self.features != expected:
            raise ShapeMismatchError(
                f"{name} has {self.features} features per sample, expected {expected}"
            )

    def require_size(self, expected: int, name: str = "batch") -> None:
        if self.size != expected:
            raise ShapeMismatchError(
                f"{name} has {self.size} samples, expected {expected}"
            )


def as_batch(x) -> Batch:
    if isinstance(x, Batch):
        return x
    return Batch.from_array(x)
