"""Tests for writing movies."""

import numpy as np
import pytest

from rdcases.tools.config import get_ffmpeg_version
from rdcases.tools.misc import module_available
from rdcases.visualization import Movie

has_ffmpeg_python = module_available("ffmpeg")
has_ffmpeg = get_ffmpeg_version() is not None and has_ffmpeg_python


@pytest.mark.skipif(not has_ffmpeg_python, reason="requires ffmpeg-python")
def test_movie_frame_checks(tmp_path):
    """Test that invalid frames are rejected before ffmpeg is started."""
    movie = Movie(tmp_path / "movie.mp4")
    with pytest.raises(ValueError):
        movie.add_frame(np.zeros((4, 4, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        movie.add_frame(np.zeros((4, 4), dtype=np.uint8))
    assert movie.num_frames == 0
    movie.close()
    assert not (tmp_path / "movie.mp4").exists()


@pytest.mark.skipif(not has_ffmpeg, reason="requires ffmpeg")
def test_movie_writing(tmp_path, rng):
    """Test writing frames to a movie."""
    path = tmp_path / "movie.mp4"
    with Movie(path, framerate=10) as movie:
        for _ in range(5):
            movie.add_frame(rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            movie.add_frame(np.zeros((8, 8, 3), dtype=np.uint8))
        assert movie.num_frames == 5
    assert path.stat().st_size > 0
