# kinfer

A small inference toolkit built on numpy. It provides a three-dimensional
`Tensor` (channels × rows × cols), a set of layers that run a forward pass
over a batch of tensors, a reader for delimited numeric files, and image
helpers for detection pipelines.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Tensors

```python
from kinfer.tensor import Tensor, tensor_element_add, tensor_padding

t = Tensor(2, 3, 4)          # 2 channels, 3 rows, 4 cols, filled with zeros
t.fill(1.0)
t.shapes()                   # [2, 3, 4]
t.raw_shapes()               # [2, 3, 4]

padded = tensor_padding(t, [1, 1, 1, 1], 0.0)   # up, bottom, left, right
padded.shapes()              # [2, 5, 6]

total = tensor_element_add(t, t)
total.at(0, 0, 0)            # 2.0

t.reshape([24], True)        # row-major flatten
t.raw_shapes()               # [24]
```

Other operations on `Tensor`: `index`/`put` (flat offsets, column-major within
each channel), `slice` (a writable view of one channel), `padding` (in place),
`fill` with a scalar or with row-major values, `flatten`, `review`, `clone`,
`rand` (standard normal samples), `ones` and `transform`.

Module functions: `tensor_create`, `tensor_padding`, `tensor_element_add` and
`tensor_element_multiply` (both may write into a given output tensor),
`tensor_broadcast`, which expands a per-channel `(c, 1, 1)` tensor to match a
`(c, h, w)` one, and `tensor_is_same`, which compares shapes and every element
within an absolute tolerance.

## Layers

Every layer has `forward(inputs, outputs)`. `inputs` is a list of tensors,
one per batch item; `outputs` is a list of the same length whose entries may
be `None` or empty, in which case the layer creates them. The list is updated
in place and also returned. Problems found while checking the arguments raise
`kinfer.layer.InferError`, whose `status` names the kind of failure (for
example `"input_empty"`); shape inconsistencies met during the computation
raise `ValueError`.

```python
from kinfer.tensor import Tensor
from kinfer.linear import LinearLayer
from kinfer.pooling import MaxPoolingLayer

x = Tensor(3, 8, 8)
x.rand()

pooled = MaxPoolingLayer(0, 0, 2, 2, 2, 2).forward([x], [None])
pooled[0].shapes()           # [3, 4, 4]

linear = LinearLayer(4, 2, True)           # in_features, out_features, use_bias
linear.set_weights([1.0] * 8)              # flat values, row-major
linear.set_bias([0.5, -0.5])
features = Tensor(1, 4, 3)
features.fill(1.0)
result = linear.forward([features], [None])
result[0].shapes()           # [1, 2, 3]
result[0].at(0, 0, 0)        # 4.5
```

Available layers:

| Module | Layers |
| --- | --- |
| `kinfer.linear` | `LinearLayer` (`weight @ input + bias` on `(1, in_features, n)` tensors) |
| `kinfer.flatten` | `FlattenLayer` (merges NCHW dimensions; negative dims allowed) |
| `kinfer.cat` | `CatLayer` (concatenation along channels, `dim` 1 or -3) |
| `kinfer.batchnorm` | `BatchNorm2dLayer` (running mean/variance plus affine transform) |
| `kinfer.upsample` | `UpSampleLayer` (nearest neighbour, `UpSampleMode.NEAREST`) |
| `kinfer.pooling` | `MaxPoolingLayer`, `AdaptiveAveragePoolingLayer` |

Layers with parameters derive from `kinfer.layer.ParamLayer`. Its `weights()`
and `bias()` return the parameter tensors; `set_weights` and `set_bias` accept
either a list of tensors of the same shapes or a flat list of values that is
split evenly over the tensors. For `BatchNorm2dLayer` the weights hold the
running means and the bias the running variances.

`kinfer.layer` also keeps a registry of layer creators:
`register_layer(layer_type, creator)` adds one (registering a name twice is an
error), `create_layer(layer_type, op)` calls the creator with `op` and returns
the layer, and `registered_types()` lists the names. The registry starts
empty; no layer registers itself.

## Loading data

`kinfer.load_data.load_csv(path, ",")` reads a delimited file into a float32
numpy matrix. Reading stops at the first empty line, short rows are padded
with zeros, and cells that do not start with a number are left at zero.
`csv_matrix_size(lines, ",")` returns the `(rows, cols)` such a file would
give.

## Image helpers

`kinfer.image_util` works on numpy image arrays, with sizes given as
`(width, height)`:

- `letterbox(image, new_shape, stride, color, fixed_shape, scale_up)` resizes
  with the aspect ratio kept (bilinear, via Pillow) and pads with `color`; it
  returns the padded image and the inverse of the scale ratio.
- `letterbox_geometry(...)` computes the ratio, resized size and borders
  without touching pixels.
- `scale_coords(img_shape, rect, img_origin_shape)` maps a `Rect` found on a
  letterboxed image back to the original image and returns a new, clipped
  `Rect`.

`Detection` bundles a `Rect`, a confidence and a class id.

## What this package does not do

It has no convolution layer and no activation layers (ReLU, sigmoid, SiLU,
hard sigmoid, hard swish, softmax), so it cannot run a typical network end to
end on its own. It does not read model description or weight files, build a
graph of layers, or provide a command-line program; layers are constructed
and chained by the caller.