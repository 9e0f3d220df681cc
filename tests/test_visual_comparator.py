import pytest

from core.image_store import FileArtifactSink, FileBaselineStore, load_image
from core.visual_comparator import DIFF_COLOR, VisualComparator, diff_images
from models.comparison import ComparisonOutcome

from helpers import FailingScreenshotSource, StaticScreenshotSource, oversized_png, solid_image

def test_identical_images_pass_with_zero_difference(white_2x2):
    result = VisualComparator().compare(white_2x2, white_2x2.copy())

    assert result.passed
    assert result.diff_percentage == 0.0
    assert result.outcome == ComparisonOutcome.COMPARED
    assert result.metadata['differing_pixels'] == 0
    assert result.metadata['resized'] is False

def test_one_black_pixel_out_of_four(white_2x2, one_black_pixel_2x2):
    comparator = VisualComparator()

    failing = comparator.compare(white_2x2, one_black_pixel_2x2, threshold=0.05)
    assert failing.diff_percentage == 0.25
    assert not failing.passed

    at_threshold = comparator.compare(white_2x2, one_black_pixel_2x2, threshold=0.25)
    assert at_threshold.passed

def test_default_threshold_comes_from_constructor(white_2x2, one_black_pixel_2x2):
    assert VisualComparator(threshold=0.3).compare(white_2x2, one_black_pixel_2x2).passed

def test_single_channel_difference_counts():
    baseline = solid_image(1, 1, (10, 20, 30))
    actual = solid_image(1, 1, (10, 20, 31))

    assert VisualComparator().compare(baseline, actual).diff_percentage == 1.0

def test_actual_is_resized_to_baseline_dimensions():
    baseline = solid_image(4, 4)
    actual = solid_image(2, 2)

    result = VisualComparator().compare(baseline, actual)

    assert result.metadata['total_pixels'] == 16
    assert result.metadata['resized'] is True
    assert result.diff_percentage == 0.0
    assert result.error is None

def test_comparison_is_idempotent(white_2x2, one_black_pixel_2x2):
    comparator = VisualComparator()

    first = comparator.compare(white_2x2, one_black_pixel_2x2)
    second = comparator.compare(white_2x2, one_black_pixel_2x2)

    assert first == second

def test_diff_image_marks_changed_pixels_red(white_2x2, one_black_pixel_2x2):
    count, diff = diff_images(white_2x2, one_black_pixel_2x2)

    assert count == 1
    assert diff.getpixel((0, 0)) == DIFF_COLOR
    assert diff.getpixel((1, 1)) == (255, 255, 255)

@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_out_of_range_threshold_is_rejected(threshold, white_2x2):
    with pytest.raises(ValueError):
        VisualComparator().compare(white_2x2, white_2x2, threshold=threshold)

def test_missing_image_is_rejected(white_2x2):
    with pytest.raises(ValueError):
        VisualComparator().compare(None, white_2x2)

def test_compare_files_without_baseline_returns_sentinel(tmp_path, white_2x2):
    actual_path = tmp_path / "actual.png"
    white_2x2.save(actual_path)

    result = VisualComparator().compare_files(tmp_path / "missing.png", actual_path)

    assert not result.passed
    assert result.diff_percentage == 1.0
    assert result.missing_baseline
    assert result.baseline_path is None
    assert result.actual_path is None
    assert result.diff_path is None

@pytest.mark.parametrize("content", [b"", b"definitely not a png"])
def test_compare_files_with_unreadable_actual_returns_io_error(tmp_path, white_2x2, content):
    baseline_path = tmp_path / "baseline.png"
    white_2x2.save(baseline_path)
    actual_path = tmp_path / "actual.png"
    actual_path.write_bytes(content)

    result = VisualComparator().compare_files(baseline_path, actual_path)

    assert not result.passed
    assert result.diff_percentage == 1.0
    assert result.outcome == ComparisonOutcome.IO_ERROR
    assert result.error

def test_compare_files_reports_baseline_path(tmp_path, white_2x2):
    baseline_path = tmp_path / "baseline.png"
    actual_path = tmp_path / "actual.png"
    white_2x2.save(baseline_path)
    white_2x2.save(actual_path)

    result = VisualComparator().compare_files(baseline_path, actual_path)

    assert result.passed
    assert result.baseline_path == str(baseline_path)

def test_artifacts_are_persisted_when_named(tmp_path, white_2x2, one_black_pixel_2x2):
    sink = FileArtifactSink(tmp_path / "actual", tmp_path / "diff")
    comparator = VisualComparator(artifact_sink=sink)

    result = comparator.compare(white_2x2, one_black_pixel_2x2, name="LoginPage")

    assert result.actual_path.startswith(str(tmp_path / "actual" / "LoginPage_"))
    assert "LoginPage_diff_" in result.diff_path
    assert load_image(result.diff_path).getpixel((0, 0)) == DIFF_COLOR

def test_artifacts_are_not_persisted_without_name(tmp_path, white_2x2):
    sink = FileArtifactSink(tmp_path / "actual", tmp_path / "diff")

    result = VisualComparator(artifact_sink=sink).compare(white_2x2, white_2x2)

    assert result.actual_path is None
    assert not (tmp_path / "actual").exists()

def test_capture_and_compare_against_stored_baseline(tmp_path, white_2x2, one_black_pixel_2x2):
    store = FileBaselineStore(tmp_path)
    comparator = VisualComparator()
    assert comparator.save_baseline(StaticScreenshotSource(white_2x2), store, "Dashboard")

    same = comparator.capture_and_compare(StaticScreenshotSource(white_2x2), store, "Dashboard")
    changed = comparator.capture_and_compare(StaticScreenshotSource(one_black_pixel_2x2), store, "Dashboard")

    assert same.passed
    assert same.baseline_path == store.path_for("Dashboard")
    assert not changed.passed
    assert changed.diff_percentage == 0.25

def test_capture_and_compare_without_baseline_skips_capture(tmp_path, white_2x2):
    source = StaticScreenshotSource(white_2x2)

    result = VisualComparator().capture_and_compare(source, FileBaselineStore(tmp_path), "Unknown")

    assert result.missing_baseline
    assert source.captures == 0

def test_capture_failure_returns_io_error(tmp_path, white_2x2):
    store = FileBaselineStore(tmp_path)
    store.save("Login", white_2x2)

    result = VisualComparator().capture_and_compare(FailingScreenshotSource(), store, "Login")

    assert result.outcome == ComparisonOutcome.IO_ERROR
    assert "browser crashed" in result.error

def test_save_baseline_failure_returns_none(tmp_path):
    assert VisualComparator().save_baseline(FailingScreenshotSource(), FileBaselineStore(tmp_path), "Login") is None

def test_corrupt_stored_baseline_returns_io_error(tmp_path, white_2x2):
    (tmp_path / "Login.png").write_bytes(b"")

    result = VisualComparator().compare_with_baseline(FileBaselineStore(tmp_path), "Login", white_2x2)

    assert result.outcome == ComparisonOutcome.IO_ERROR

def test_result_metadata_is_copied_not_mutated(white_2x2):
    result = VisualComparator().compare(white_2x2, white_2x2)
    tagged = result.with_metadata('page', 'Login')

    assert 'page' not in result.metadata
    assert tagged.metadata['page'] == 'Login'
    assert tagged.metadata['threshold'] == 0.05

def test_metadata_is_read_only(white_2x2):
    result = VisualComparator().compare(white_2x2, white_2x2)

    with pytest.raises(TypeError):
        result.metadata['page'] = 'Login'
    assert result.model_dump()['metadata']['threshold'] == 0.05

def test_zero_area_image_is_rejected(white_2x2):
    with pytest.raises(ValueError):
        VisualComparator().compare(solid_image(0, 0), white_2x2)

def test_zero_area_actual_against_stored_baseline_returns_io_error(tmp_path, white_2x2):
    store = FileBaselineStore(tmp_path)
    store.save("Login", white_2x2)

    result = VisualComparator().compare_with_baseline(store, "Login", solid_image(0, 0))

    assert result.outcome == ComparisonOutcome.IO_ERROR
    assert result.diff_percentage == 1.0

def test_compare_files_with_zero_byte_baseline_returns_io_error(tmp_path, white_2x2):
    baseline_path = tmp_path / "baseline.png"
    baseline_path.write_bytes(b"")
    actual_path = tmp_path / "actual.png"
    white_2x2.save(actual_path)

    result = VisualComparator().compare_files(baseline_path, actual_path)

    assert not result.passed
    assert result.outcome == ComparisonOutcome.IO_ERROR
    assert result.baseline_path is None

def test_oversized_baseline_returns_io_error(tmp_path, white_2x2):
    (tmp_path / "Login.png").write_bytes(oversized_png())
    actual_path = tmp_path / "actual.png"
    white_2x2.save(actual_path)
    comparator = VisualComparator()

    from_files = comparator.compare_files(tmp_path / "Login.png", actual_path)
    from_store = comparator.compare_with_baseline(FileBaselineStore(tmp_path), "Login", white_2x2)
    captured = comparator.capture_and_compare(StaticScreenshotSource(white_2x2), FileBaselineStore(tmp_path), "Login")

    for result in (from_files, from_store, captured):
        assert not result.passed
        assert result.outcome == ComparisonOutcome.IO_ERROR
