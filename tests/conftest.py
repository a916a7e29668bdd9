"""
Pytest configuration and shared fixtures for Photo Booth tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

from concurrent.futures import Executor, Future

import numpy as np
import pytest

from PB_Libs.ImagingLib.frame_models import Frame, Mask


class ImmediateExecutor(Executor):
    """Executor that runs work synchronously inside submit()."""

    def __init__(self):
        self.submitted = 0
        self.shutdown_called = False

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.shutdown_called = True


class PendingExecutor(Executor):
    """Executor whose futures never complete until resolved by the test."""

    def __init__(self):
        self.futures = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.futures.append((future, fn, args))
        return future

    def resolve_all(self):
        for future, fn, args in self.futures:
            if not future.done():
                future.set_result(fn(*args))

    def shutdown(self, wait=True, *, cancel_futures=False):
        pass


class FakeEngine:
    """Segmentation engine returning a fixed-value mask sized to the frame."""

    def __init__(self, value=1, size=None, error=None):
        self.value = value
        self.size = size
        self.error = error
        self.calls = 0
        self.closed = False

    def segment_person(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        width, height = self.size or frame.size
        return Mask.full(width, height, self.value)

    def close(self):
        self.closed = True


@pytest.fixture
def temp_data_dir(tmp_path):
    """
    Provide a temporary directory for booth data.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def make_frame():
    """Factory for solid-color frames: make_frame(width, height, color)."""
    def _make(width=8, height=6, color=(200, 100, 50, 255)):
        return Frame.solid(width, height, color)
    return _make


@pytest.fixture
def gradient_frame():
    """A 16x12 frame where every pixel has a different color."""
    height, width = 12, 16
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = (xs * 15) % 256
    pixels[:, :, 1] = (ys * 20) % 256
    pixels[:, :, 2] = ((xs + ys) * 7) % 256
    pixels[:, :, 3] = 255
    return Frame(pixels)


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def pending_executor():
    return PendingExecutor()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def engine_factory():
    """Factory for engines: engine_factory(value=0, size=None, error=None)."""
    return FakeEngine


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.

    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
    ]
