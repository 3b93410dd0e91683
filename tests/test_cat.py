import numpy as np
import pytest

from kinfer.cat import CatLayer
from kinfer.layer import InferError
from kinfer.tensor import Tensor


def _tensor(channels, rows, cols, start=0.0):
    tensor = Tensor(channels, rows, cols)
    count = channels * rows * cols
    tensor.fill(list(np.arange(start, start + count, dtype=np.float32)))
    return tensor


def test_two_inputs_concatenate_into_one_output():
    a = _tensor(2, 3, 4)
    b = _tensor(2, 3, 4, start=100.0)
    outputs = [None]
    result = CatLayer(1).forward([a, b], outputs)
    out = result[0]
    assert out.shapes() == [4, 3, 4]
    assert np.array_equal(out.data()[:2], a.data())
    assert np.array_equal(out.data()[2:], b.data())
    assert outputs[0] is out


def test_batched_inputs_are_interleaved():
    inputs = [_tensor(1, 2, 2, start=10.0 * k) for k in range(4)]
    outputs = [None, None]
    CatLayer(-3).forward(inputs, outputs)
    assert outputs[0].shapes() == [2, 2, 2]
    assert np.array_equal(outputs[0].data()[0], inputs[0].data()[0])
    assert np.array_equal(outputs[0].data()[1], inputs[2].data()[0])
    assert np.array_equal(outputs[1].data()[0], inputs[1].data()[0])
    assert np.array_equal(outputs[1].data()[1], inputs[3].data()[0])


def test_preallocated_output_is_filled():
    a = _tensor(1, 2, 3)
    b = _tensor(1, 2, 3, start=50.0)
    target = Tensor(2, 2, 3)
    outputs = [target]
    CatLayer(1).forward([a, b], outputs)
    assert outputs[0] is target
    assert np.array_equal(target.data()[1], b.data()[0])


def test_empty_inputs_raise():
    with pytest.raises(InferError) as info:
        CatLayer(1).forward([], [None])
    assert info.value.status == "input_empty"


def test_equal_input_and_output_count_raises():
    with pytest.raises(InferError) as info:
        CatLayer(1).forward([_tensor(1, 2, 2)], [None])
    assert info.value.status == "input_output_size"


def test_unsupported_dim_raises():
    with pytest.raises(InferError) as info:
        CatLayer(2).forward([_tensor(1, 2, 2), _tensor(1, 2, 2)], [None])
    assert info.value.status == "dimension_parameter"


def test_wrong_output_channels_raise():
    with pytest.raises(InferError) as info:
        CatLayer(1).forward(
            [_tensor(1, 2, 2), _tensor(1, 2, 2)], [Tensor(3, 2, 2)]
        )
    assert info.value.status == "channel_parameter"


def test_wrong_output_size_raises():
    with pytest.raises(InferError) as info:
        CatLayer(1).forward(
            [_tensor(1, 2, 2), _tensor(1, 2, 2)], [Tensor(2, 3, 2)]
        )
    assert info.value.status == "input_output_size"


def test_mismatched_input_sizes_raise():
    with pytest.raises(ValueError):
        CatLayer(1).forward([_tensor(1, 2, 2), _tensor(1, 3, 3)], [None])