"""Submission client for the Kelvin submit API."""

from __future__ import annotations

import logging

import requests
from pydantic import ValidationError

from kelvin_submit.errors import SubmissionError
from kelvin_submit.types import SubmitAccepted, SubmitRejected, SubmitResponse, SubmitResult

logger = logging.getLogger(__name__)

ARCHIVE_FIELD = "solution"
ARCHIVE_FILENAME = "submit.zip"


def submit_url(base_url: str, assignment_id: int) -> str:
    """Build the submit endpoint URL for an assignment."""
    return f"{base_url.rstrip('/')}/api/submits/{assignment_id}"


def submit(archive: bytes, assignment_id: int, token: str, base_url: str) -> SubmitResult:
    """Upload an archive as a new submit of an assignment.

    Exactly one request is made; there are no retries.

    Args:
        archive: ZIP archive bytes.
        assignment_id: Assignment into which the archive is submitted.
        token: Kelvin API token.
        base_url: Base URL of the Kelvin instance.

    Returns:
        SubmitAccepted if Kelvin answered 200 OK, SubmitRejected otherwise.

    Raises:
        SubmissionError: If no response was received or the response body of
            a successful submit cannot be parsed.
    """
    files = {ARCHIVE_FIELD: (ARCHIVE_FILENAME, archive)}
    headers = {"Authorization": f"Bearer {token}"}

    try:
        response = requests.post(submit_url(base_url, assignment_id), files=files, headers=headers)
    except requests.RequestException as e:
        raise SubmissionError("sending submit to Kelvin") from e

    if response.status_code != requests.codes.ok:
        logger.error("The submit was not successful. Status error: %s %s", response.status_code, response.reason)
        body = response.text
        logger.debug("Response content: %s", body)
        return SubmitRejected(status_code=response.status_code, body=body)

    try:
        data = SubmitResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise SubmissionError("deserializing response") from e

    logger.info("Created submit #%d for task %s", data.submit.id, data.task.name)
    logger.info("You can find the submit at %s", data.submit.url)
    return SubmitAccepted(submit_id=data.submit.id, url=data.submit.url, task_name=data.task.name)
