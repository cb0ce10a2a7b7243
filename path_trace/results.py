from __future__ import annotations

from dataclasses import dataclass

from .trace_core import AttemptOutcome

WIN_TITLE = "You Win!"
LOSS_TITLE = "Game Over"
WIN_MESSAGE = "Congratulations! You successfully traced the path!"
OFF_PATH_MESSAGE = "You went off the path. Try again!"
LOW_COVERAGE_MESSAGE = "Not enough of the path was covered. Try again!"
UNSCORED_TITLE = "No Score"
UNSCORED_MESSAGE = "This course has no path to trace, so the round cannot be scored."


@dataclass(frozen=True, slots=True)
class ResultText:
    """Display text for the result screen."""

    title: str
    message: str
    coverage: str
    is_win: bool


def result_text(outcome: AttemptOutcome | None) -> ResultText:
    """Build the result screen text for a finished attempt.

    ``None`` stands for a round that ended without a verdict (empty mask).
    """

    if outcome is None:
        return ResultText(title=UNSCORED_TITLE, message=UNSCORED_MESSAGE, coverage="", is_win=False)

    if outcome.is_win:
        title = WIN_TITLE
        message = WIN_MESSAGE
    else:
        title = LOSS_TITLE
        message = OFF_PATH_MESSAGE if outcome.failed_off_path else LOW_COVERAGE_MESSAGE

    return ResultText(
        title=title,
        message=message,
        coverage=f"Coverage: {outcome.percentage:.2f}%",
        is_win=bool(outcome.is_win),
    )
