"""Max pooling and adaptive average pooling layers."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from kinfer.layer import InferError, Layer
from kinfer.tensor import Tensor, tensor_padding

_LOWEST = float(np.finfo(np.float32).min)


def _check_batch(
    inputs: Sequence[Tensor], outputs: Sequence[Tensor | None], name: str
) -> None:
    if not inputs:
        raise InferError(
            f"The input feature map of {name} layer is empty", "input_empty"
        )
    if len(inputs) != len(outputs):
        raise InferError(
            f"The input and output size of {name} layer is not adapting",
            "input_output_size",
        )


def _windows(
    data: np.ndarray, window_h: int, window_w: int, stride_h: int, stride_w: int
) -> np.ndarray:
    """Strided (channels, out_h, out_w, window_h, window_w) windows over data."""
    return sliding_window_view(data, (window_h, window_w), axis=(1, 2))[
        :, ::stride_h, ::stride_w
    ]


class MaxPoolingLayer(Layer):
    """Takes the maximum of each pooling window; padding never wins the maximum."""

    def __init__(
        self,
        padding_h: int,
        padding_w: int,
        pooling_size_h: int,
        pooling_size_w: int,
        stride_h: int,
        stride_w: int,
    ) -> None:
        super().__init__("MaxPooling")
        self.padding_h = padding_h
        self.padding_w = padding_w
        self.pooling_size_h = pooling_size_h
        self.pooling_size_w = pooling_size_w
        self.stride_h = stride_h
        self.stride_w = stride_w

    def _output_size(self, rows: int, cols: int) -> tuple[int, int] | None:
        span_h = rows - self.pooling_size_h + 2 * self.padding_h
        span_w = cols - self.pooling_size_w + 2 * self.padding_w
        if span_h < 0 or span_w < 0:
            return None
        return span_h // self.stride_h + 1, span_w // self.stride_w + 1

    def _check(
        self, inputs: Sequence[Tensor], outputs: Sequence[Tensor | None]
    ) -> None:
        _check_batch(inputs, outputs, "max pooling")
        if not self.stride_h or not self.stride_w:
            raise InferError(
                "The stride parameter is set incorrectly. It must always be "
                "greater than 0",
                "stride_parameter",
            )
        for tensor, output in zip(inputs, outputs):
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of max pooling layer is empty",
                    "input_empty",
                )
            size = self._output_size(tensor.rows(), tensor.cols())
            if size is None:
                raise InferError(
                    "The output size of max pooling layer is less than zero",
                    "output_size",
                )
            if output is not None and not output.empty():
                if (output.rows(), output.cols()) != size:
                    raise InferError(
                        "The output size of max pooling layer is not adapting",
                        "output_size",
                    )

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        self._check(inputs, outputs)
        for i, tensor in enumerate(inputs):
            if self.padding_h > 0 or self.padding_w > 0:
                tensor = tensor_padding(
                    tensor,
                    [self.padding_h, self.padding_h, self.padding_w, self.padding_w],
                    _LOWEST,
                )
            channels, rows, cols = tensor.shapes()
            output_h = (rows - self.pooling_size_h) // self.stride_h + 1
            output_w = (cols - self.pooling_size_w) // self.stride_w + 1

            output = outputs[i]
            if output is None or output.empty():
                output = Tensor(channels, output_h, output_w)
                outputs[i] = output
            if output.shapes() != [channels, output_h, output_w]:
                raise ValueError("The output size of max pooling layer is error")

            windows = _windows(
                tensor.data(),
                self.pooling_size_h,
                self.pooling_size_w,
                self.stride_h,
                self.stride_w,
            )
            output.data()[...] = windows.max(axis=(3, 4))
        return outputs


class AdaptiveAveragePoolingLayer(Layer):
    """Averages windows chosen so that the output has a fixed height and width."""

    def __init__(self, output_h: int, output_w: int) -> None:
        super().__init__("AdaptiveAveragePooling")
        self.output_h = output_h
        self.output_w = output_w

    def _check(
        self, inputs: Sequence[Tensor], outputs: Sequence[Tensor | None]
    ) -> None:
        _check_batch(inputs, outputs, "adaptive pooling")
        if self.output_w <= 0 or self.output_h <= 0:
            raise InferError(
                "The output size of adaptive pooling is less than zero",
                "output_size",
            )
        for tensor, output in zip(inputs, outputs):
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of adaptive pooling layer is empty",
                    "input_empty",
                )
            if output is not None and not output.empty():
                if output.rows() != self.output_h or output.cols() != self.output_w:
                    raise InferError(
                        "The output size of adaptive pooling is not adapting",
                        "output_size",
                    )

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        self._check(inputs, outputs)
        for i, tensor in enumerate(inputs):
            channels, rows, cols = tensor.shapes()
            stride_h = rows // self.output_h
            stride_w = cols // self.output_w
            if stride_h <= 0 or stride_w <= 0:
                raise ValueError(
                    "The stride parameter is set incorrectly. It must always be "
                    "greater than 0"
                )
            pooling_h = rows - (self.output_h - 1) * stride_h
            pooling_w = cols - (self.output_w - 1) * stride_w
            if pooling_h <= 0 or pooling_w <= 0:
                raise ValueError(
                    "The pooling parameter is set incorrectly. It must always be "
                    "greater than 0"
                )

            output = outputs[i]
            if output is None or output.empty():
                output = Tensor(channels, self.output_h, self.output_w)
                outputs[i] = output
            if output.shapes() != [channels, self.output_h, self.output_w]:
                raise ValueError("The output size of adaptive pooling is error")

            windows = _windows(tensor.data(), pooling_h, pooling_w, stride_h, stride_w)
            sums = windows.sum(axis=(3, 4), dtype=np.float32)
            output.data()[...] = sums / np.float32(pooling_h * pooling_w)
        return outputs