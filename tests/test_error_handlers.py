from video_looper.constants import HTTPStatus
from video_looper.exceptions import FFmpegError, FFmpegNotFoundError, ManifestWriteError, MissingInputError
from video_looper.utils.error_handlers import summarize_stderr, to_http_exception


def test_summarize_flattens_and_truncates():
    text = "line one\nline two\r\n" + "x" * 400
    summary = summarize_stderr(text, limit=20)
    assert "\n" not in summary
    assert summary == "line one line two xx..."[:20] + "..."


def test_validation_errors_are_bad_requests():
    error = to_http_exception("Video processing", MissingInputError("audio", "/tmp/a.mp3"))
    assert error.status_code == HTTPStatus.BAD_REQUEST
    assert "/tmp/a.mp3" in error.detail


def test_ffmpeg_errors_carry_details():
    error = to_http_exception("Video processing", FFmpegError("COMBINING", 1, "Stream map '1:a:0' matches no streams."))
    assert error.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "Details: Stream map" in error.detail


def test_missing_ffmpeg_is_service_unavailable():
    error = to_http_exception("Video processing", FFmpegNotFoundError("ffmpeg"))
    assert error.status_code == HTTPStatus.SERVICE_UNAVAILABLE


def test_other_application_errors():
    error = to_http_exception("Video processing", ManifestWriteError("/tmp/x", "disk full"))
    assert error.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "disk full" in error.detail
