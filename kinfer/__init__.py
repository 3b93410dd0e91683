"""Tensors, neural-network layers, a CSV reader and image helpers for inference."""

__version__ = "0.1.0"

__all__ = [
    "batchnorm",
    "cat",
    "flatten",
    "image_util",
    "layer",
    "linear",
    "load_data",
    "pooling",
    "tensor",
    "upsample",
]