"""
Scalar/vector activations used by the box decoder.

Non-finite inputs are not guarded: NaN propagates through both functions
(softmax of a vector containing NaN is NaN everywhere).
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

ArrayLike = Union[float, Sequence[float], np.ndarray]


def sigmoid(value: ArrayLike) -> Union[float, np.ndarray]:
    """
    Logistic function 1 / (1 + exp(-v)).

    Evaluated as exp(-|v|) so neither branch can overflow; large magnitudes
    saturate to 0.0 / 1.0. Scalars in, float out; arrays in, array out.
    """

    v = np.asarray(value, dtype=np.float64)
    z = np.exp(-np.abs(v))
    out = np.where(v >= 0, 1.0 / (1.0 + z), z / (1.0 + z))
    if out.ndim == 0:
        return float(out)
    return out


def softmax(values: ArrayLike) -> np.ndarray:
    """
    Numerically stable softmax over a 1D vector of logits.

    The max is subtracted before exponentiating, so an all-equal input gives
    exactly 1/len for every entry. Returns a new float64 array.
    """

    v = np.asarray(values, dtype=np.float64).reshape(-1)
    if v.size == 0:
        raise ValueError("softmax() needs at least one value")

    e = np.exp(v - np.max(v))
    return e / np.sum(e)
