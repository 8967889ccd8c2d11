import numpy as np
import pytest

from rockglobe.resources import (
    BufferState,
    BufferTracker,
    DeferredDeleter,
    Handle,
    player_model_matrix,
)


def test_handle_get_and_destroy_once():
    released = []
    handle = Handle(7, released.append)
    assert handle.get() == 7
    assert int(handle) == 7
    assert handle.is_valid()
    handle.destroy()
    handle.destroy()
    assert released == [7]
    assert not handle.is_valid()
    with pytest.raises(ValueError):
        handle.get()


def test_empty_handle():
    handle = Handle()
    assert not handle.is_valid()
    handle.destroy()
    with pytest.raises(ValueError):
        handle.get()


def test_handle_without_destructor_fails_on_destroy():
    handle = Handle(3)
    with pytest.raises(RuntimeError):
        handle.destroy()


def test_handle_context_manager_releases():
    released = []
    with Handle(11, released.append) as handle:
        assert handle.get() == 11
        assert released == []
    assert released == [11]
    assert not handle.is_valid()


def test_deferred_deleter_batches_deletions():
    deleted_buffers = []
    deleted_textures = []
    deleter = DeferredDeleter(deleted_buffers.append, deleted_textures.append)
    first = deleter.create_buffer(1)
    second = deleter.create_buffer(2)
    texture = deleter.create_texture(5)
    first.destroy()
    second.destroy()
    texture.destroy()
    assert deleted_buffers == [] and deleted_textures == []

    deleter.perform_cleanup()
    assert deleted_buffers == [[1, 2]]
    assert deleted_textures == [[5]]

    deleter.perform_cleanup()
    assert deleted_buffers == [[1, 2]]
    assert deleted_textures == [[5]]


def test_deferred_deleter_context_cleans_up():
    deleted_buffers = []
    deleted_textures = []
    with DeferredDeleter(deleted_buffers.append, deleted_textures.append) as deleter:
        deleter.create_texture(9).destroy()
    assert deleted_textures == [[9]]
    assert deleted_buffers == []


def test_buffer_tracker_transitions():
    tracker = BufferTracker()
    assert tracker.state is BufferState.UNBUFFERED
    assert tracker.can_be_deleted()
    assert tracker.mark_for_buffering() is True
    assert tracker.is_buffering()
    assert not tracker.can_be_deleted()
    assert tracker.mark_for_buffering() is False
    tracker.mark_as_buffered()
    assert tracker.is_buffered()
    assert not tracker.is_buffering()
    assert tracker.can_be_deleted()
    assert tracker.mark_for_buffering() is False


def test_player_model_matrix_invariants():
    position = np.array([3.0, 4.0, 12.0])
    orientation = np.array([1.0, 0.0, 0.0])
    matrix = player_model_matrix(position, orientation)
    up = position / np.linalg.norm(position)

    assert matrix.shape == (4, 4)
    np.testing.assert_allclose(matrix[3], [0.0, 0.0, 0.0, 1.0])
    np.testing.assert_allclose(matrix[:3, 1], 2.5 * up)
    np.testing.assert_allclose(matrix[:3, 3], position - up)

    right = matrix[:3, 0]
    back = matrix[:3, 2]
    assert np.linalg.norm(right) == pytest.approx(1.0)
    assert np.linalg.norm(back) == pytest.approx(1.0)
    assert np.dot(right, up) == pytest.approx(0.0, abs=1e-12)
    assert np.dot(back, up) == pytest.approx(0.0, abs=1e-12)
    assert np.dot(right, back) == pytest.approx(0.0, abs=1e-12)


def test_player_model_matrix_maps_box_top_above_position():
    position = np.array([0.0, 0.0, 100.0])
    matrix = player_model_matrix(position, [0.0, 1.0, 0.0])
    top = matrix @ np.array([0.0, 0.5, 0.0, 1.0])
    np.testing.assert_allclose(top[:3], position + 0.25 * np.array([0.0, 0.0, 1.0]))