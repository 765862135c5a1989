"""Unit tests for the submission client.

Tests submit() with mocked HTTP responses.
No real API calls are made.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from kelvin_submit.errors import SubmissionError
from kelvin_submit.submission import submit, submit_url
from kelvin_submit.types import SubmitAccepted, SubmitRejected

SUCCESS_BODY = b'{"submit":{"id":42,"url":"https://x/s/42"},"task":{"name":"hw1"}}'


def _response(status_code: int, content: bytes = b"", reason: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.content = content
    response.text = content.decode("utf-8")
    return response


class TestSubmitUrl:
    def test_builds_api_path(self):
        assert submit_url("https://kelvin.cs.vsb.cz", 7) == "https://kelvin.cs.vsb.cz/api/submits/7"

    def test_strips_trailing_slash(self):
        assert submit_url("http://localhost:8000/", 0) == "http://localhost:8000/api/submits/0"


class TestSubmit:
    def test_success(self, caplog):
        caplog.set_level(logging.INFO)
        with patch("kelvin_submit.submission.requests.post", return_value=_response(200, SUCCESS_BODY)):
            result = submit(b"PK", 42, "secret", "https://x")

        assert result == SubmitAccepted(submit_id=42, url="https://x/s/42", task_name="hw1")
        assert "Created submit #42 for task hw1" in caplog.text
        assert "You can find the submit at https://x/s/42" in caplog.text

    def test_posts_multipart_with_bearer_token(self):
        with patch("kelvin_submit.submission.requests.post", return_value=_response(200, SUCCESS_BODY)) as post:
            submit(b"archive-bytes", 13, "secret", "https://kelvin.example")

        post.assert_called_once()
        args, kwargs = post.call_args
        assert args[0] == "https://kelvin.example/api/submits/13"
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}
        assert kwargs["files"] == {"solution": ("submit.zip", b"archive-bytes")}
        assert "timeout" not in kwargs

    def test_rejected_is_not_an_error(self, caplog):
        caplog.set_level(logging.DEBUG)
        with patch(
            "kelvin_submit.submission.requests.post",
            return_value=_response(403, b"forbidden", "Forbidden"),
        ):
            result = submit(b"PK", 42, "secret", "https://x")

        assert result == SubmitRejected(status_code=403, body="forbidden")
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "403" in errors[0].getMessage()
        debug = [r for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("forbidden" in r.getMessage() for r in debug)

    def test_server_error_is_rejected(self):
        with patch("kelvin_submit.submission.requests.post", return_value=_response(500, b"oops")):
            result = submit(b"PK", 1, "secret", "https://x")

        assert isinstance(result, SubmitRejected)
        assert result.status_code == 500

    def test_created_status_is_rejected(self):
        """Only 200 OK counts as success."""
        with patch("kelvin_submit.submission.requests.post", return_value=_response(201, SUCCESS_BODY)):
            result = submit(b"PK", 1, "secret", "https://x")

        assert isinstance(result, SubmitRejected)

    def test_transport_error_is_fatal(self):
        with patch(
            "kelvin_submit.submission.requests.post",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(SubmissionError, match="sending submit to Kelvin") as exc_info:
                submit(b"PK", 1, "secret", "https://x")

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b'{"submit":{"id":42},"task":{"name":"hw1"}}',
            b'{"submit":{"id":"abc","url":"u"},"task":{"name":"hw1"}}',
            b'{"submit":{"id":"42","url":"u"},"task":{"name":"hw1"}}',
            b'{"submit":{"id":-1,"url":"u"},"task":{"name":"hw1"}}',
            b'{"submit":{"id":true,"url":"u"},"task":{"name":"hw1"}}',
        ],
    )
    def test_malformed_success_body_is_fatal(self, body):
        with patch("kelvin_submit.submission.requests.post", return_value=_response(200, body)):
            with pytest.raises(SubmissionError, match="deserializing response"):
                submit(b"PK", 1, "secret", "https://x")

    def test_makes_exactly_one_request(self):
        with patch("kelvin_submit.submission.requests.post", return_value=_response(503)) as post:
            submit(b"PK", 1, "secret", "https://x")

        assert post.call_count == 1
