"""Layer base classes and the registry of layer creators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

import numpy as np

from kinfer.tensor import Tensor


class InferError(RuntimeError):
    """Raised when a layer cannot run a forward pass on its arguments.

    ``status`` names the kind of failure, for example ``"input_empty"``.
    """

    def __init__(self, message: str, status: str = "failed") -> None:
        super().__init__(message)
        self.status = status


class Layer(ABC):
    """A computation step that maps a batch of input tensors to outputs."""

    def __init__(self, layer_name: str) -> None:
        self.layer_name = layer_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(layer_name={self.layer_name!r})"

    @abstractmethod
    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        """Compute the outputs for ``inputs``.

        Entries of ``outputs`` that are None or empty are replaced with new
        tensors; the list is updated in place and also returned.
        """


def _is_tensor_list(values: Sequence[Any]) -> bool:
    return all(isinstance(value, Tensor) for value in values)


def _replace_tensors(
    current: list[Tensor], new: Sequence[Tensor], what: str
) -> list[Tensor]:
    if len(new) != len(current):
        raise ValueError(
            f"expected {len(current)} {what} tensors, got {len(new)}"
        )
    for old, replacement in zip(current, new):
        if replacement is None or old.shapes() != replacement.shapes():
            raise ValueError(f"{what} tensor shape does not match")
    return list(new)


def _fill_from_values(current: list[Tensor], values: Sequence[float], what: str) -> None:
    flat = np.asarray(values, dtype=np.float32).ravel()
    expected = sum(tensor.size() for tensor in current)
    if expected != flat.size:
        raise ValueError(f"expected {expected} {what} values, got {flat.size}")
    if not current or flat.size % len(current) != 0:
        raise ValueError(f"{what} values cannot be split over {len(current)} tensors")
    for tensor, chunk in zip(current, np.split(flat, len(current))):
        tensor.fill(chunk)


class ParamLayer(Layer):
    """A layer that owns weight and bias tensors."""

    def __init__(self, layer_name: str) -> None:
        super().__init__(layer_name)
        self._weights: list[Tensor] = []
        self._bias: list[Tensor] = []

    def init_weight_param(self, count: int, channels: int, rows: int, cols: int) -> None:
        """Allocate ``count`` zero weight tensors of the given shape."""
        self._weights = [Tensor(channels, rows, cols) for _ in range(count)]

    def init_bias_param(self, count: int, channels: int, rows: int, cols: int) -> None:
        """Allocate ``count`` zero bias tensors of the given shape."""
        self._bias = [Tensor(channels, rows, cols) for _ in range(count)]

    def weights(self) -> list[Tensor]:
        return list(self._weights)

    def bias(self) -> list[Tensor]:
        return list(self._bias)

    def set_weights(self, weights: Sequence[Tensor] | Sequence[float]) -> None:
        """Replace the weight tensors, or fill them from a flat value list.

        Flat values are split evenly over the tensors and fill each one in
        row-major order, channel by channel.
        """
        if _is_tensor_list(weights):
            self._weights = _replace_tensors(self._weights, weights, "weight")
        else:
            _fill_from_values(self._weights, weights, "weight")

    def set_bias(self, bias: Sequence[Tensor] | Sequence[float]) -> None:
        """Replace the bias tensors, or fill them from a flat value list.

        Replacing with tensors is ignored when the layer has no bias.
        """
        if _is_tensor_list(bias):
            if self._bias:
                self._bias = _replace_tensors(self._bias, bias, "bias")
        else:
            _fill_from_values(self._bias, bias, "bias")


Creator = Callable[[Any], Layer]

_REGISTRY: dict[str, Creator] = {}


def register_layer(layer_type: str, creator: Creator) -> None:
    """Register the creator that builds layers of ``layer_type``."""
    if creator is None or not callable(creator):
        raise ValueError("layer creator must be callable")
    if layer_type in _REGISTRY:
        raise ValueError(f"Layer type: {layer_type} has already registered!")
    _REGISTRY[layer_type] = creator


def create_layer(layer_type: str, op: Any) -> Layer:
    """Build a layer of ``layer_type`` from the operator description ``op``."""
    try:
        creator = _REGISTRY[layer_type]
    except KeyError:
        raise KeyError(f"Can not find the layer type: {layer_type}") from None
    layer = creator(op)
    if not isinstance(layer, Layer):
        raise ValueError(f"Create the layer: {layer_type} failed")
    return layer


def registered_types() -> list[str]:
    """Names of all registered layer types, sorted."""
    return sorted(_REGISTRY)