"""Exception types raised by the kelvin submit workflow."""

from __future__ import annotations


class KelvinError(Exception):
    """Base error for a failed step of the submit workflow.

    The message names the step that failed (e.g. "sending submit to Kelvin");
    the underlying error is attached as ``__cause__``.
    """


class ConfigError(KelvinError):
    """Invalid configuration file, option or environment value."""


class WorkspaceError(KelvinError):
    """The project workspace root could not be located."""


class ArchiveError(KelvinError):
    """The ZIP archive could not be finalised."""


class SubmissionError(KelvinError):
    """The submit could not be sent or its response could not be understood."""


class BrowserError(KelvinError):
    """The submit page could not be opened in a browser."""


def describe_error(error: BaseException) -> str:
    """Render an error together with its chain of causes.

    Args:
        error: Error to describe.

    Returns:
        Messages joined by ``": "``, outermost first.
    """
    parts: list[str] = []
    current: BaseException | None = error
    while current is not None:
        message = str(current) or type(current).__name__
        parts.append(message)
        current = current.__cause__
    return ": ".join(parts)
