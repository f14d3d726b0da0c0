"""Errors reported to the command line when a wikistyle run cannot continue."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """A wikistyle run stopped at one step, such as reading input or fetching a page.

    Attributes:
        stage: Short step name the CLI reports, such as `fetch` or `config`.
        detail: What went wrong; also the exception message.
        hint: Optional next step for the user, printed under the detail.
    """

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
