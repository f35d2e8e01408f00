import threading

import numpy as np
import pytest

from frame_monitor.monitor.histogram import HistogramStore


def test_store_starts_at_zero():
    store = HistogramStore(20)
    assert len(store) == 20
    for array in store.snapshot().values():
        assert array.shape == (20,)
        assert not array.any()


def test_add_updates_three_sequences():
    store = HistogramStore(5)
    store.add(2, 0.5)
    store.add(2, 2.0)
    assert store.counts.tolist() == [0, 0, 2, 0, 0]
    assert store.weights[2] == pytest.approx(2.5)
    assert store.weights_sq[2] == pytest.approx(4.25)
    assert store.uncertainties()[2] == pytest.approx(np.sqrt(4.25))


def test_invalid_size_rejected():
    with pytest.raises(ValueError):
        HistogramStore(0)


def test_add_many_skips_excluded_indices():
    store = HistogramStore(4)
    accumulated = store.add_many(np.array([0, -1, 3, 3, 4]), np.array([1.0, 5.0, 2.0, 3.0, 7.0]))
    assert accumulated == 3
    assert store.counts.tolist() == [1, 0, 0, 2]
    assert store.weights.tolist() == [1.0, 0.0, 0.0, 5.0]
    assert store.weights_sq.tolist() == [1.0, 0.0, 0.0, 13.0]


def test_merge_adds_elementwise_and_checks_length():
    a = HistogramStore(3)
    b = HistogramStore(3)
    a.add(0, 1.0)
    b.add(0, 2.0)
    b.add(2, 3.0)
    a.merge(b)
    assert a.counts.tolist() == [2, 0, 1]
    assert a.weights.tolist() == [3.0, 0.0, 3.0]
    with pytest.raises(ValueError):
        a.merge(HistogramStore(4))


def test_concurrent_adds_are_not_lost():
    n_bins, n_threads, per_thread = 7, 8, 2000
    store = HistogramStore(n_bins)
    barrier = threading.Barrier(n_threads)

    def worker(offset):
        barrier.wait()
        for i in range(per_thread):
            store.add((i + offset) % n_bins, 0.5)

    threads = [threading.Thread(target=worker, args=(k,)) for k in range(n_threads)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.total_counts == n_threads * per_thread
    assert store.weights.sum() == pytest.approx(0.5 * n_threads * per_thread)
    assert store.weights_sq.sum() == pytest.approx(0.25 * n_threads * per_thread)


def test_accumulation_order_does_not_change_sums():
    rng = np.random.default_rng(7)
    indices = rng.integers(0, 10, 1000)
    weights = rng.uniform(0.0, 3.0, 1000)

    forward = HistogramStore(10)
    for i, p in zip(indices, weights):
        forward.add(int(i), float(p))

    order = rng.permutation(1000)
    shuffled = HistogramStore(10)
    for i, p in zip(indices[order], weights[order]):
        shuffled.add(int(i), float(p))

    # Equal up to floating-point rounding; bit patterns may differ
    np.testing.assert_array_equal(forward.counts, shuffled.counts)
    np.testing.assert_allclose(forward.weights, shuffled.weights, rtol=1e-12)
    np.testing.assert_allclose(forward.weights_sq, shuffled.weights_sq, rtol=1e-12)


def test_reset_clears_all_bins():
    store = HistogramStore(3)
    store.add(1, 4.0)
    store.reset()
    assert store.total_counts == 0
    assert not store.weights_sq.any()
