"""Nearest-neighbour upsampling."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np

from kinfer.layer import InferError, Layer
from kinfer.tensor import Tensor


class UpSampleMode(Enum):
    """Supported upsampling modes."""

    NEAREST = 0


class UpSampleLayer(Layer):
    """Scales the rows and cols of each channel by copying the nearest source value."""

    def __init__(
        self,
        scale_h: float,
        scale_w: float,
        mode: UpSampleMode = UpSampleMode.NEAREST,
    ) -> None:
        super().__init__("upsample")
        self.scale_h = float(scale_h)
        self.scale_w = float(scale_w)
        self.mode = mode

    def _source_indices(self, count: int, scale: float, limit: int) -> np.ndarray:
        positions = np.arange(count, dtype=np.float32) / np.float32(scale)
        indices = positions.astype(np.int64)
        if indices.size and indices.max() >= limit:
            raise ValueError("source index out of range")
        return indices

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        if not inputs:
            raise InferError(
                "The input feature map of upsample layer is empty", "input_empty"
            )
        if len(inputs) != len(outputs):
            raise InferError(
                "The input and output size is not adapting", "input_output_size"
            )
        for tensor in inputs:
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of upsample layer is empty", "input_empty"
                )
        if self.mode is not UpSampleMode.NEAREST:
            raise ValueError(f"Unsupported upsample mode: {self.mode}")

        for i, tensor in enumerate(inputs):
            channels, rows, cols = tensor.shapes()
            output = outputs[i]
            if output is None or output.empty():
                output = Tensor(
                    channels, int(rows * self.scale_h), int(cols * self.scale_w)
                )
                outputs[i] = output
            out_c, out_h, out_w = output.shapes()
            if out_h != rows * self.scale_h:
                raise ValueError("The height of the feature map is not adapting!")
            if out_w != cols * self.scale_w:
                raise ValueError("The width of the feature map is not adapting!")
            if out_c != channels:
                raise ValueError("The channel of the feature map is not adapting!")

            src_h = self._source_indices(out_h, self.scale_h, rows)
            src_w = self._source_indices(out_w, self.scale_w, cols)
            output.data()[...] = tensor.data()[:, src_h][:, :, src_w]
        return outputs