"""Two-dimensional batch normalisation for inference."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from kinfer.layer import InferError, ParamLayer
from kinfer.tensor import Tensor


class BatchNorm2dLayer(ParamLayer):
    """Normalises each channel with running statistics and an affine transform.

    The running means are the layer's weights and the running variances its
    bias, one (1, 1, 1) tensor per feature.
    """

    def __init__(
        self,
        num_features: int,
        eps: float,
        affine_weight: Sequence[float],
        affine_bias: Sequence[float],
    ) -> None:
        super().__init__("Batchnorm")
        self.eps = eps
        self.affine_weight = [float(v) for v in affine_weight]
        self.affine_bias = [float(v) for v in affine_bias]
        self.init_weight_param(num_features, 1, 1, 1)
        self.init_bias_param(num_features, 1, 1, 1)

    def _check(
        self, inputs: Sequence[Tensor], outputs: Sequence[Tensor | None]
    ) -> None:
        if not inputs:
            raise InferError(
                "The input feature map of batchnorm layer is empty", "input_empty"
            )
        if len(inputs) != len(outputs):
            raise InferError(
                "The input and output size is not adapting", "input_output_size"
            )
        if len(self._weights) != len(self._bias):
            raise InferError(
                "BatchNorm2d layer do not have the same mean values and bias values",
                "weight_parameter",
            )
        if len(self.affine_bias) != len(self.affine_weight):
            raise InferError(
                "BatchNorm2d layer do not have the same affine weight and bias values",
                "weight_parameter",
            )
        for tensor, output in zip(inputs, outputs):
            if tensor is None or tensor.empty():
                raise InferError(
                    "The input feature map of batchNorm2d layer is empty",
                    "input_empty",
                )
            if output is not None and not output.empty():
                if tensor.shapes() != output.shapes():
                    raise InferError(
                        "The input and output size is not adapting",
                        "input_output_size",
                    )

    def _statistics(self) -> tuple[np.ndarray, np.ndarray]:
        for mean, var in zip(self._weights, self._bias):
            if mean.size() != 1 or var.size() != 1:
                raise ValueError("running statistics must hold one value each")
        means = np.array([m.index(0) for m in self._weights], dtype=np.float32)
        variances = np.array([v.index(0) for v in self._bias], dtype=np.float32)
        return means, variances

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        self._check(inputs, outputs)
        means, variances = self._statistics()
        feature_count = len(means)
        std = np.sqrt(variances + np.float32(self.eps)).reshape(-1, 1, 1)
        scale = np.asarray(self.affine_weight, dtype=np.float32).reshape(-1, 1, 1)
        shift = np.asarray(self.affine_bias, dtype=np.float32).reshape(-1, 1, 1)

        for i, tensor in enumerate(inputs):
            if tensor.channels() != feature_count:
                raise ValueError(
                    "The channel of of input and mean value mat is not equal"
                )
            if tensor.channels() != len(self.affine_weight):
                raise ValueError(
                    "The channel of input and affine weight is not equal"
                )
            output = outputs[i]
            if output is None or output.empty():
                output = Tensor.from_shapes(tensor.shapes())
                outputs[i] = output
            if output.shapes() != tensor.shapes():
                raise ValueError("The output size of batchnorm is error")
            normalised = (tensor.data() - means.reshape(-1, 1, 1)) / std
            output.data()[...] = normalised * scale + shift
        return outputs