import numpy as np
import pytest

from kinfer.tensor import (
    Tensor,
    tensor_broadcast,
    tensor_create,
    tensor_element_add,
    tensor_element_multiply,
    tensor_is_same,
    tensor_padding,
)


def _arange_tensor(channels=2, rows=3, cols=4):
    t = Tensor(channels, rows, cols)
    t.fill(list(range(channels * rows * cols)))
    return t


def test_raw_shapes_follow_dimensions():
    assert Tensor(1, 1, 5).raw_shapes() == [5]
    assert Tensor(1, 3, 4).raw_shapes() == [3, 4]
    assert Tensor(2, 3, 4).raw_shapes() == [2, 3, 4]


def test_dimensions_and_size():
    t = Tensor(2, 3, 4)
    assert (t.channels(), t.rows(), t.cols()) == (2, 3, 4)
    assert t.shapes() == [2, 3, 4]
    assert t.size() == 2 * 3 * 4
    assert not t.empty()


def test_from_shapes_matches_constructor():
    t = Tensor.from_shapes([3, 5, 7])
    assert t.shapes() == [3, 5, 7]
    with pytest.raises(ValueError):
        Tensor.from_shapes([3, 5])


def test_empty_tensor_queries_raise():
    t = Tensor(0, 0, 0)
    assert t.empty()
    with pytest.raises(ValueError):
        t.rows()
    with pytest.raises(ValueError):
        t.fill(1.0)


def test_fill_values_is_row_major_per_channel():
    t = _arange_tensor()
    np.testing.assert_array_equal(t.data(), np.arange(24).reshape(2, 3, 4))
    assert t.at(1, 2, 3) == float(np.arange(24).reshape(2, 3, 4)[1, 2, 3])


def test_fill_wrong_count_raises():
    t = Tensor(2, 2, 2)
    with pytest.raises(ValueError):
        t.fill([1.0, 2.0])


def test_index_is_column_major_within_channel():
    t = _arange_tensor()
    assert t.index(1) == t.at(0, 1, 0)
    assert t.index(3) == t.at(0, 0, 1)
    assert t.index(12) == t.at(1, 0, 0)
    with pytest.raises(IndexError):
        t.index(24)


def test_put_writes_through_index():
    t = Tensor(2, 3, 4)
    t.put(5, 7.5)
    assert t.index(5) == 7.5
    assert float(t.data().sum()) == 7.5


def test_slice_is_writable_view():
    t = Tensor(2, 2, 2)
    t.slice(1)[0, 1] = 3.0
    assert t.at(1, 0, 1) == 3.0
    with pytest.raises(IndexError):
        t.slice(2)


def test_at_out_of_range_raises():
    t = Tensor(1, 2, 2)
    with pytest.raises(IndexError):
        t.at(0, 2, 0)


def test_padding_in_place():
    t = _arange_tensor(1, 2, 2)
    original = t.data().copy()
    t.padding([1, 2, 3, 4], -1.0)
    assert t.shapes() == [1, 2 + 1 + 2, 2 + 3 + 4]
    np.testing.assert_array_equal(t.data()[:, 1:3, 3:5], original)
    assert float(t.data().sum()) == float(original.sum()) - (t.size() - 4)


def test_tensor_padding_returns_new_tensor():
    t = _arange_tensor()
    padded = tensor_padding(t, [1, 1, 2, 2], 0.0)
    assert padded.shapes() == [2, 5, 8]
    np.testing.assert_array_equal(padded.data()[:, 1:4, 2:6], t.data())
    assert float(padded.data().sum()) == float(t.data().sum())
    assert t.shapes() == [2, 3, 4]


def test_tensor_padding_with_value():
    t = Tensor(1, 1, 1)
    padded = tensor_padding(t, [1, 1, 1, 1], 2.5)
    assert padded.at(0, 0, 0) == 2.5
    assert padded.at(0, 1, 1) == 0.0


def test_reshape_row_major_keeps_row_major_order():
    t = _arange_tensor()
    t.reshape([24], True)
    assert t.raw_shapes() == [24]
    assert t.shapes() == [1, 24, 1]
    np.testing.assert_array_equal(t.data().reshape(-1), np.arange(24))


def test_reshape_row_major_two_dims():
    t = _arange_tensor()
    t.reshape([4, 6], True)
    assert t.raw_shapes() == [4, 6]
    np.testing.assert_array_equal(t.data()[0], np.arange(24).reshape(4, 6))


def test_reshape_column_major_keeps_flat_index_order():
    t = _arange_tensor()
    before = [t.index(i) for i in range(t.size())]
    t.reshape([3, 2, 4], False)
    assert t.shapes() == [3, 2, 4]
    assert t.raw_shapes() == [3, 2, 4]
    assert [t.index(i) for i in range(t.size())] == before


def test_reshape_wrong_size_raises():
    t = Tensor(2, 3, 4)
    with pytest.raises(ValueError):
        t.reshape([5, 5])
    with pytest.raises(ValueError):
        t.reshape([1, 2, 3, 4])


def test_flatten_row_major():
    t = _arange_tensor()
    t.flatten(True)
    assert t.raw_shapes() == [24]
    np.testing.assert_array_equal(t.data().reshape(-1), np.arange(24))


def test_review_reinterprets_row_major():
    t = _arange_tensor()
    t.review([4, 3, 2])
    np.testing.assert_array_equal(t.data(), np.arange(24).reshape(4, 3, 2))
    with pytest.raises(ValueError):
        t.review([5, 3, 2])


def test_clone_is_independent():
    t = _arange_tensor()
    copy = t.clone()
    copy.fill(0.0)
    assert tensor_is_same(t, _arange_tensor())
    assert float(copy.data().sum()) == 0.0


def test_ones_and_transform():
    t = Tensor(2, 2, 2)
    t.ones()
    t.transform(lambda v: v * 3.0)
    np.testing.assert_array_equal(t.data(), np.full((2, 2, 2), 3.0))


def test_rand_changes_values_and_keeps_shape():
    t = Tensor(3, 10, 10)
    t.rand()
    assert t.shapes() == [3, 10, 10]
    assert float(np.abs(t.data()).sum()) > 0.0


def test_tensor_is_same():
    a = _arange_tensor()
    b = _arange_tensor()
    assert tensor_is_same(a, b)
    b.put(0, b.index(0) + 0.5)
    assert not tensor_is_same(a, b)
    assert tensor_is_same(a, b, 1.0)
    assert not tensor_is_same(a, Tensor(2, 4, 3))


def test_element_add_same_shape():
    a = _arange_tensor()
    b = _arange_tensor()
    result = tensor_element_add(a, b)
    np.testing.assert_array_equal(result.data(), a.data() * 2)


def test_element_multiply_into_output():
    a = _arange_tensor()
    out = Tensor(2, 3, 4)
    returned = tensor_element_multiply(a, a, out)
    assert returned is out
    np.testing.assert_array_equal(out.data(), a.data() ** 2)


def test_element_add_output_shape_mismatch_raises():
    a = _arange_tensor()
    with pytest.raises(ValueError):
        tensor_element_add(a, a, Tensor(2, 4, 3))


def test_broadcast_channel_values():
    big = _arange_tensor()
    small = Tensor(2, 1, 1)
    small.fill([10.0, 20.0])
    left, right = tensor_broadcast(big, small)
    assert left is big
    assert right.shapes() == big.shapes()
    assert np.all(right.slice(0) == 10.0)
    assert np.all(right.slice(1) == 20.0)

    left, right = tensor_broadcast(small, big)
    assert right is big
    assert np.all(left.slice(1) == 20.0)


def test_element_add_broadcasts():
    big = _arange_tensor()
    small = Tensor(2, 1, 1)
    small.fill([1.0, 2.0])
    result = tensor_element_add(big, small)
    np.testing.assert_array_equal(result.slice(0), big.slice(0) + 1.0)
    np.testing.assert_array_equal(result.slice(1), big.slice(1) + 2.0)


def test_broadcast_errors():
    with pytest.raises(ValueError):
        tensor_broadcast(Tensor(2, 3, 4), Tensor(3, 1, 1))
    with pytest.raises(ValueError):
        tensor_broadcast(Tensor(2, 3, 4), Tensor(2, 2, 2))


def test_tensor_create():
    t = tensor_create(4, 5, 6)
    assert t.shapes() == [4, 5, 6]
    assert float(t.data().sum()) == 0.0