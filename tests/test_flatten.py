import numpy as np
import pytest

from kinfer.flatten import FlattenLayer
from kinfer.layer import InferError
from kinfer.tensor import Tensor


def _ramp(channels, rows, cols):
    tensor = Tensor(channels, rows, cols)
    tensor.fill([float(v) for v in range(channels * rows * cols)])
    return tensor


def test_flatten_all():
    source = _ramp(2, 3, 4)
    outputs = FlattenLayer(1, -1).forward([source], [None])
    result = outputs[0]
    assert result.raw_shapes() == [24]
    assert result.shapes() == [1, 24, 1]
    assert [result.index(i) for i in range(24)] == [float(v) for v in range(24)]


def test_flatten_spatial_dims():
    source = _ramp(2, 3, 4)
    result = FlattenLayer(2, 3).forward([source], [None])[0]
    assert result.raw_shapes() == [2, 12]
    assert result.shapes() == [1, 2, 12]
    assert np.array_equal(result.data().ravel(), source.data().ravel())


def test_flatten_channels_and_rows():
    source = _ramp(2, 3, 4)
    result = FlattenLayer(1, 2).forward([source], [None])[0]
    assert result.raw_shapes() == [6, 4]
    assert result.shapes() == [1, 6, 4]
    assert np.array_equal(result.data().ravel(), source.data().ravel())


def test_input_is_not_modified():
    source = _ramp(2, 3, 4)
    before = source.data().copy()
    outputs = FlattenLayer(1, -1).forward([source], [None])
    assert outputs[0] is not source
    assert np.array_equal(source.data(), before)
    assert source.shapes() == [2, 3, 4]


def test_existing_output_with_same_shape_is_reused():
    source = _ramp(2, 3, 4)
    existing = Tensor(2, 3, 4)
    outputs = [existing]
    FlattenLayer(1, -1).forward([source], outputs)
    fresh = FlattenLayer(1, -1).forward([source], [None])[0]
    assert outputs[0] is existing
    assert np.array_equal(existing.data(), fresh.data())
    assert existing.raw_shapes() == fresh.raw_shapes()


def test_batch_is_processed():
    first = _ramp(2, 2, 2)
    second = _ramp(2, 2, 2)
    second.data()[...] *= -1
    outputs = FlattenLayer(1, 3).forward([first, second], [None, None])
    assert np.array_equal(outputs[0].data().ravel(), first.data().ravel())
    assert np.array_equal(outputs[1].data().ravel(), second.data().ravel())


@pytest.mark.parametrize("start_dim, end_dim", [(3, 2), (2, 2), (0, 3), (1, 4)])
def test_invalid_dims_raise(start_dim, end_dim):
    with pytest.raises(ValueError):
        FlattenLayer(start_dim, end_dim).forward([_ramp(1, 2, 2)], [None])


def test_empty_inputs_raise():
    with pytest.raises(InferError) as info:
        FlattenLayer(1, -1).forward([], [])
    assert info.value.status == "input_empty"


def test_size_mismatch_raises():
    with pytest.raises(InferError) as info:
        FlattenLayer(1, -1).forward([_ramp(1, 2, 2)], [None, None])
    assert info.value.status == "input_output_size"


def test_none_input_raises():
    with pytest.raises(InferError) as info:
        FlattenLayer(1, -1).forward([None], [None])
    assert info.value.status == "input_empty"