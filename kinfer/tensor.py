"""Three-dimensional float tensors laid out as (channels, rows, cols)."""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

_DTYPE = np.float32


def _raw_shapes_for(channels: int, rows: int, cols: int) -> list[int]:
    if channels == 1 and rows == 1:
        return [cols]
    if channels == 1:
        return [rows, cols]
    return [channels, rows, cols]


class Tensor:
    """A float32 tensor of channels x rows x cols.

    Flat offsets (``index``/``put``) follow column-major order inside each
    channel, channel after channel.
    """

    __slots__ = ("_data", "_raw_shapes")

    def __init__(self, channels: int, rows: int, cols: int) -> None:
        self._data = np.zeros((channels, rows, cols), dtype=_DTYPE)
        self._raw_shapes = _raw_shapes_for(channels, rows, cols)

    @classmethod
    def from_shapes(cls, shapes: Sequence[int]) -> "Tensor":
        """Create a tensor from a ``[channels, rows, cols]`` sequence."""
        if len(shapes) != 3:
            raise ValueError(f"expected three shape values, got {len(shapes)}")
        channels, rows, cols = shapes
        return cls(channels, rows, cols)

    def __repr__(self) -> str:
        return f"Tensor(shape={list(self._data.shape)}, raw_shapes={self._raw_shapes})"

    def _require_data(self) -> None:
        if self._data.size == 0:
            raise ValueError("tensor is empty")

    def rows(self) -> int:
        self._require_data()
        return self._data.shape[1]

    def cols(self) -> int:
        self._require_data()
        return self._data.shape[2]

    def channels(self) -> int:
        self._require_data()
        return self._data.shape[0]

    def size(self) -> int:
        self._require_data()
        return int(self._data.size)

    def shapes(self) -> list[int]:
        self._require_data()
        return [self.channels(), self.rows(), self.cols()]

    def raw_shapes(self) -> list[int]:
        if not self._raw_shapes:
            raise ValueError("raw shapes are empty")
        return list(self._raw_shapes)

    def empty(self) -> bool:
        return self._data.size == 0

    def data(self) -> np.ndarray:
        """The underlying (channels, rows, cols) array; writes go through."""
        return self._data

    def _locate(self, offset: int) -> tuple[int, int, int]:
        if not 0 <= offset < self._data.size:
            raise IndexError("Tensor capacity is not enough!")
        _, rows, cols = self._data.shape
        channel, rest = divmod(offset, rows * cols)
        col, row = divmod(rest, rows)
        return channel, row, col

    def index(self, offset: int) -> float:
        return float(self._data[self._locate(offset)])

    def put(self, offset: int, value: float) -> None:
        self._data[self._locate(offset)] = value

    def slice(self, channel: int) -> np.ndarray:
        """A writable (rows, cols) view of one channel."""
        if not 0 <= channel < self.channels():
            raise IndexError(f"channel {channel} out of range")
        return self._data[channel]

    def at(self, channel: int, row: int, col: int) -> float:
        if not 0 <= row < self.rows():
            raise IndexError(f"row {row} out of range")
        if not 0 <= col < self.cols():
            raise IndexError(f"col {col} out of range")
        if not 0 <= channel < self.channels():
            raise IndexError(f"channel {channel} out of range")
        return float(self._data[channel, row, col])

    def padding(self, pads: Sequence[int], padding_value: float = 0.0) -> None:
        """Pad in place by (up, bottom, left, right)."""
        self._require_data()
        if len(pads) != 4:
            raise ValueError("padding needs four values")
        up, bottom, left, right = pads
        channels, rows, cols = self._data.shape
        padded = np.full(
            (channels, rows + up + bottom, cols + left + right),
            padding_value,
            dtype=_DTYPE,
        )
        padded[:, up:up + rows, left:left + cols] = self._data
        self._data = padded

    def fill(self, value: float | Sequence[float]) -> None:
        """Fill with a scalar, or with row-major values channel by channel."""
        self._require_data()
        if np.isscalar(value):
            self._data.fill(value)
            return
        values = np.asarray(value, dtype=_DTYPE)
        if values.size != self._data.size:
            raise ValueError(
                f"expected {self._data.size} values, got {values.size}"
            )
        self._data[...] = values.reshape(self._data.shape)

    def flatten(self, row_major: bool = False) -> None:
        self._require_data()
        self.reshape([self.size()], row_major)

    def clone(self) -> "Tensor":
        copy = Tensor.__new__(Tensor)
        copy._data = self._data.copy()
        copy._raw_shapes = list(self._raw_shapes)
        return copy

    def rand(self) -> None:
        """Fill with standard normal samples."""
        self._require_data()
        rng = np.random.default_rng()
        self._data[...] = rng.standard_normal(self._data.shape).astype(_DTYPE)

    def ones(self) -> None:
        self.fill(1.0)

    def transform(self, func: Callable[[float], float]) -> None:
        """Apply ``func`` to every element in place."""
        self._require_data()
        self._data[...] = np.vectorize(func, otypes=[_DTYPE])(self._data)

    def reshape(self, shapes: Sequence[int], row_major: bool = False) -> None:
        self._require_data()
        shapes = list(shapes)
        if not shapes:
            raise ValueError("target shapes are empty")
        if len(shapes) > 3:
            raise ValueError("at most three dimensions are supported")
        if int(np.prod(shapes)) != self.size():
            raise ValueError(
                f"cannot reshape {self.size()} elements into {shapes}"
            )
        if len(shapes) == 3:
            target = shapes
        elif len(shapes) == 2:
            target = [1, shapes[0], shapes[1]]
        else:
            target = [1, shapes[0], 1]
        if row_major:
            self.review(target)
        else:
            channels, rows, cols = target
            flat = self._data.transpose(0, 2, 1).reshape(-1)
            self._data = np.ascontiguousarray(
                flat.reshape(channels, cols, rows).transpose(0, 2, 1)
            )
        self._raw_shapes = shapes

    def review(self, shapes: Sequence[int]) -> None:
        """Reinterpret the elements in row-major order as a new shape."""
        self._require_data()
        if len(shapes) < 3:
            raise ValueError("review needs channels, rows and cols")
        channels, rows, cols = shapes[0], shapes[1], shapes[2]
        if channels * rows * cols != self._data.size:
            raise ValueError(
                f"cannot view {self._data.size} elements as {list(shapes[:3])}"
            )
        self._data = self._data.reshape(channels, rows, cols).copy()


def tensor_create(channels: int, rows: int, cols: int) -> Tensor:
    return Tensor(channels, rows, cols)


def tensor_is_same(a: Tensor, b: Tensor, threshold: float = 1e-5) -> bool:
    """True if both shapes match and every element differs by at most threshold."""
    if a is None or b is None:
        raise ValueError("tensors must not be None")
    if a.shapes() != b.shapes():
        return False
    return bool(np.all(np.abs(a.data() - b.data()) <= threshold))


def tensor_broadcast(s1: Tensor, s2: Tensor) -> tuple[Tensor, Tensor]:
    """Expand a (channels, 1, 1) tensor to match the other one."""
    if s1 is None or s2 is None:
        raise ValueError("tensors must not be None")
    if s1.shapes() == s2.shapes():
        return s1, s2
    if s1.channels() != s2.channels():
        raise ValueError("Tensors shape are not adapting")

    def expand(small: Tensor, like: Tensor) -> Tensor:
        if small.size() != small.channels():
            raise ValueError("Broadcast shape is not adapting!")
        expanded = Tensor(small.channels(), like.rows(), like.cols())
        expanded.data()[...] = small.data().reshape(-1, 1, 1)
        return expanded

    if s2.rows() == 1 and s2.cols() == 1:
        return s1, expand(s2, s1)
    if s1.rows() == 1 and s1.cols() == 1:
        return expand(s1, s2), s2
    raise ValueError("Broadcast shape is not adapting!")


def _elementwise(
    op: Callable[[np.ndarray, np.ndarray], np.ndarray],
    tensor1: Tensor,
    tensor2: Tensor,
    output: Tensor | None,
) -> Tensor:
    if tensor1 is None or tensor2 is None:
        raise ValueError("tensors must not be None")
    if tensor1.shapes() == tensor2.shapes():
        left, right = tensor1, tensor2
    else:
        if tensor1.channels() != tensor2.channels():
            raise ValueError("Tensors shape are not adapting")
        left, right = tensor_broadcast(tensor1, tensor2)
    if output is None:
        output = Tensor.from_shapes(left.shapes())
    elif output.shapes() != left.shapes():
        raise ValueError("output tensor shape does not match the operands")
    output.data()[...] = op(left.data(), right.data())
    return output


def tensor_element_add(
    tensor1: Tensor, tensor2: Tensor, output: Tensor | None = None
) -> Tensor:
    """Element-wise sum, broadcasting (c, 1, 1) operands; writes into output if given."""
    return _elementwise(np.add, tensor1, tensor2, output)


def tensor_element_multiply(
    tensor1: Tensor, tensor2: Tensor, output: Tensor | None = None
) -> Tensor:
    """Element-wise product, broadcasting (c, 1, 1) operands; writes into output if given."""
    return _elementwise(np.multiply, tensor1, tensor2, output)


def tensor_padding(
    tensor: Tensor, pads: Sequence[int], padding_value: float = 0.0
) -> Tensor:
    """Return a padded copy; pads are (up, bottom, left, right)."""
    if tensor is None or tensor.empty():
        raise ValueError("tensor is empty")
    if len(pads) != 4:
        raise ValueError("padding needs four values")
    up, bottom, left, right = pads
    output = Tensor(
        tensor.channels(),
        tensor.rows() + up + bottom,
        tensor.cols() + left + right,
    )
    if padding_value != 0.0:
        output.fill(padding_value)
    output.data()[:, up:up + tensor.rows(), left:left + tensor.cols()] = tensor.data()
    return output