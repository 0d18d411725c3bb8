"""kernel.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for the framebench terminal output system.
No external dependencies allowed in this file.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """framebench terminal output protocol.

    Three layers of methods:

    **General messages** -- usable from any module::

        console.info("6 scenarios registered")
        console.success("Results written to run.json")
        console.warning("Interrupted")
        console.error("output file already exists")

    **Structured panels** -- tables and key-value displays::

        console.table(["Col1", "Col2"], [["a", "b"]], title="Results")
        console.kv({"Iterations": "800", "Scale": "1"})

    **Run output** -- progress and raw result lines::

        console.step(1, 6, "core/text_update")
        console.line("framework=core scenario=text_update ...")
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    # -- Structured panels --------------------------------------------------

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        """Display a table with *headers* and *rows*."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Run output ---------------------------------------------------------

    def step(self, current: int, total: int, description: str) -> None:
        """Display a progress indicator ``[current/total] description``."""
        ...

    def line(self, text: str) -> None:
        """Write *text* verbatim on its own line (no styling, no indent)."""
        ...
