import sys
from typing import Optional, TextIO

from ..data_models import Browser


def format_progress(browser: Browser, current: int, total: int) -> Optional[str]:
    """
    Formats one download status line.

    Returns None when there is nothing to report yet (no known total),
    "Downloading Chrome: 42%" while in flight, and "Downloading Chrome: Done!"
    once current reaches total.
    """
    if not total or total <= 0:
        return None
    prefix = f"Downloading {browser.display_name}"
    if current >= total:
        return f"{prefix}: Done!"
    percentage = int(max(current, 0) * 100 / total)
    return f"{prefix}: {percentage}%"


class DownloadProgress:
    def __init__(self, browser: Browser, sink: Optional[TextIO] = None, verbose: bool = False):
        """
        Download progress callback handed to the installer.

        Args:
            browser (Browser): The artifact being downloaded, used in the status text.
            sink (Optional[TextIO]): Where status lines go. Defaults to sys.stdout at call time.
            verbose (bool): Only an explicit True enables output.
        """
        self.browser = browser
        self.sink = sink
        self.enabled = verbose is True
        self._last_line: Optional[str] = None
        self._finished = False

    def __call__(self, current: int = 0, total: int = 0) -> None:
        if not self.enabled or self._finished:
            return
        line = format_progress(self.browser, current, total)
        if line is None or line == self._last_line:
            return
        self._last_line = line

        sink = self.sink if self.sink is not None else sys.stdout
        sink.write(f"\r{line}")
        if current >= total:
            self._finished = True
            sink.write("\n")
        sink.flush()
