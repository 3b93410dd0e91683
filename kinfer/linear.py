"""Fully connected layer."""

from __future__ import annotations

from typing import Sequence

from kinfer.layer import InferError, ParamLayer
from kinfer.tensor import Tensor


class LinearLayer(ParamLayer):
    """Computes ``weight @ input + bias`` on (1, in_features, n) tensors."""

    def __init__(self, in_features: int, out_features: int, use_bias: bool) -> None:
        super().__init__("Linear")
        self.in_features = in_features
        self.out_features = out_features
        self.use_bias = use_bias
        self.init_weight_param(1, 1, out_features, in_features)
        if use_bias:
            self.init_bias_param(1, 1, out_features, 1)

    def _check_parameters(self) -> None:
        if not self._weights:
            raise InferError("The weight parameters is empty", "weight_parameter")
        if self.use_bias and len(self._weights) != len(self._bias):
            raise InferError(
                "The size of the weight and bias parameters is not equal",
                "bias_parameter",
            )
        if len(self._weights) != 1:
            raise InferError(
                "The size of weight parameters is not one", "weight_parameter"
            )
        if self.use_bias and len(self._bias) != 1:
            raise InferError(
                "The size of bias parameters is not one", "bias_parameter"
            )

    def forward(
        self, inputs: Sequence[Tensor], outputs: list[Tensor | None]
    ) -> list[Tensor | None]:
        if not inputs:
            raise InferError(
                "The input feature map of linear layer is empty", "input_empty"
            )
        if len(inputs) != len(outputs):
            raise InferError(
                "The input and output size is not adapting", "input_output_size"
            )
        self._check_parameters()

        weight_tensor = self._weights[0]
        if weight_tensor.shapes() != [1, self.out_features, self.in_features]:
            raise ValueError("weight shape does not match the layer features")
        weight = weight_tensor.slice(0)

        bias = None
        if self.use_bias:
            bias_tensor = self._bias[0]
            if bias_tensor.empty() or bias_tensor.channels() != 1:
                raise ValueError("bias must be a single-channel tensor")
            if bias_tensor.rows() != self.out_features:
                raise ValueError("bias rows do not match the output features")
            bias = bias_tensor.slice(0)

        for i, tensor in enumerate(inputs):
            if tensor is None or tensor.empty():
                raise ValueError("The input feature map of linear layer is empty")
            channels, feature_dims, input_dim = tensor.shapes()
            if channels != 1:
                raise ValueError("linear input must have a single channel")
            if feature_dims != self.in_features:
                raise ValueError(
                    f"expected {self.in_features} input features, got {feature_dims}"
                )

            output = outputs[i]
            if output is None or output.empty():
                output = Tensor(1, self.out_features, input_dim)
                outputs[i] = output
            if output.shapes() != [1, self.out_features, input_dim]:
                raise ValueError("The output size of linear layer is error")
            if output.raw_shapes() != [self.out_features, input_dim]:
                raise ValueError("The output raw shapes of linear layer are error")

            result = weight @ tensor.slice(0)
            if bias is not None:
                result = result + bias
            output.slice(0)[...] = result
        return outputs