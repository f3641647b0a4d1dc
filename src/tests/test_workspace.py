"""
Tests for the per-run working area.
"""

from segdub.workspace import RUN_DIRNAME, WorkingArea, acquire_working_area


def test_reset_removes_stale_files(tmp_path):
    area = WorkingArea(tmp_path / "work")
    area.reset()
    (area.segments_dir / "seg_099.wav").write_bytes(b"old")
    area.dubbed_wav.write_bytes(b"old")

    area.reset()

    assert list(area.segments_dir.iterdir()) == []
    assert list(area.tts_dir.iterdir()) == []
    assert not area.dubbed_wav.exists()


def test_area_released_after_run(tmp_path):
    with acquire_working_area(WorkingArea(tmp_path / "work")) as area:
        area.audio_wav.write_bytes(b"pcm")
        assert area.segments_dir.is_dir()

    assert not (tmp_path / "work").exists()


def test_area_released_on_error(tmp_path):
    try:
        with acquire_working_area(WorkingArea(tmp_path / "work")):
            raise RuntimeError("stage failed")
    except RuntimeError:
        pass

    assert not (tmp_path / "work").exists()


def test_kept_area_is_wiped_by_next_acquire(tmp_path):
    area = WorkingArea(tmp_path / "work")
    with acquire_working_area(area, keep=True):
        (area.tts_dir / "tts_seg_000.wav").write_bytes(b"x")
    assert (tmp_path / "work" / "tts" / "tts_seg_000.wav").exists()

    with acquire_working_area(area, keep=True):
        assert list(area.tts_dir.iterdir()) == []


def test_area_inside_workdir_leaves_neighbours_alone(tmp_path):
    """Only the run directory is wiped, never the rest of the workdir."""
    (tmp_path / "talk.mp4").write_bytes(b"video")
    (tmp_path / "notes.txt").write_text("keep me")
    area = WorkingArea.inside(tmp_path)

    with acquire_working_area(area):
        assert area.root == tmp_path / RUN_DIRNAME

    assert (tmp_path / "talk.mp4").read_bytes() == b"video"
    assert (tmp_path / "notes.txt").read_text() == "keep me"
    assert not area.root.exists()


def test_contains(tmp_path):
    area = WorkingArea.inside(tmp_path)

    assert area.contains(area.root / "out.webm")
    assert area.contains(tmp_path / "x" / ".." / RUN_DIRNAME / "tts")
    assert not area.contains(tmp_path / "out.webm")
    assert not area.contains(tmp_path / f"{RUN_DIRNAME}-old" / "out.webm")
