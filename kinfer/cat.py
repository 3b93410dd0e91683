"""Concatenation of feature maps along the channel dimension."""

from __future__ import annotations

from typing import Sequence

from kinfer.layer import InferError, Layer
from kinfer.tensor import Tensor

_CHANNEL_DIMS = (1, -3)


class CatLayer(Layer):
    """Concatenates groups of inputs along channels.

    With ``n`` outputs, output ``i`` is built from inputs ``i``, ``i + n``,
    ``i + 2n`` and so on, in that order.
    """

    def __init__(self, dim: int) -> None:
        super().__init__("cat")
        self.dim = dim

    def _check(
        self, inputs: Sequence[Tensor], outputs: Sequence[Tensor | None]
    ) -> int:
        if not inputs:
            raise InferError(
                "The input feature map of cat layer is empty", "input_empty"
            )
        if len(inputs) == len(outputs):
            raise InferError(
                "The input and output size is not adapting", "input_output_size"
            )
        if self.dim not in _CHANNEL_DIMS:
            raise InferError(
                "The dimension of cat layer is error", "dimension_parameter"
            )
        if not outputs or len(inputs) % len(outputs) != 0:
            raise ValueError("inputs cannot be split evenly over the outputs")
        packet_size = len(inputs) // len(outputs)

        for tensor, output in zip(inputs, outputs):
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of cat layer is empty", "input_empty"
                )
            if output is None or output.empty():
                continue
            if tensor.channels() * packet_size != output.channels():
                raise InferError(
                    "The channel of input and output feature map is not adapting",
                    "channel_parameter",
                )
            if tensor.rows() != output.rows() or tensor.cols() != output.cols():
                raise InferError(
                    "The size of input and output feature map is not adapting",
                    "input_output_size",
                )
        return packet_size

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        packet_size = self._check(inputs, outputs)
        output_count = len(outputs)
        rows = inputs[0].rows()
        cols = inputs[0].cols()

        for i in range(output_count):
            output = outputs[i]
            start_channel = 0
            for tensor in inputs[i::output_count]:
                if tensor is None or tensor.empty():
                    raise ValueError("The input feature map of cat layer is empty")
                in_channels = tensor.channels()
                if tensor.rows() != rows or tensor.cols() != cols:
                    raise ValueError("cat inputs differ in rows or cols")
                if output is None or output.empty():
                    output = Tensor(in_channels * packet_size, rows, cols)
                    outputs[i] = output
                if output.shapes() != [in_channels * packet_size, rows, cols]:
                    raise ValueError("The output size of cat layer is error")
                output.data()[start_channel:start_channel + in_channels] = tensor.data()
                start_channel += in_channels
        return outputs