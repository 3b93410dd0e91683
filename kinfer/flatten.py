"""Flatten layer over NCHW dimensions."""

from __future__ import annotations

import math
from typing import Sequence

from kinfer.layer import InferError, Layer
from kinfer.tensor import Tensor

_TOTAL_DIMS = 4  # NCHW


def _copy_storage(source: Tensor, target: Tensor) -> None:
    """Copy elements in storage order (column-major per channel)."""
    if source.size() != target.size():
        raise ValueError("source and target tensors differ in size")
    flat = source.data().transpose(0, 2, 1).reshape(-1)
    channels, rows, cols = target.data().shape
    target.data()[...] = flat.reshape(channels, cols, rows).transpose(0, 2, 1)


class FlattenLayer(Layer):
    """Merges the dimensions from ``start_dim`` to ``end_dim`` (NCHW, negatives allowed)."""

    def __init__(self, start_dim: int, end_dim: int) -> None:
        super().__init__("Flatten")
        self.start_dim = start_dim
        self.end_dim = end_dim

    def _tensor_dims(self) -> tuple[int, int]:
        start = self.start_dim + _TOTAL_DIMS if self.start_dim < 0 else self.start_dim
        end = self.end_dim + _TOTAL_DIMS if self.end_dim < 0 else self.end_dim
        start -= 1
        end -= 1
        if end <= start:
            raise ValueError("End dim must greater than start dim")
        if end > 2 or start < 0:
            raise ValueError(
                "end dim must less than two and start dim must greater than zero"
            )
        return start, end

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        if not inputs:
            raise InferError(
                "The input feature map of flatten layer is empty", "input_empty"
            )
        if len(inputs) != len(outputs):
            raise InferError(
                "The input and output size is not adapting", "input_output_size"
            )
        start, end = self._tensor_dims()

        for i, tensor in enumerate(inputs):
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of flatten layer is empty", "input_empty"
                )
            shapes = tensor.shapes()
            elements = math.prod(shapes[start:end + 1])

            output = outputs[i]
            if output is None or output.empty():
                output = tensor.clone()
                outputs[i] = output
            else:
                _copy_storage(tensor, output)

            if (start, end) == (0, 2):
                output.reshape([elements], True)
            elif (start, end) == (1, 2):
                output.reshape([tensor.channels(), elements], True)
            else:
                output.reshape([elements, tensor.cols()], True)
        return outputs