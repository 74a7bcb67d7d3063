"""QApplication bootstrap for the line placement canvas."""

from __future__ import annotations

import sys


def launch_gui() -> int:
    """Open the interactive canvas.  Returns exit code."""
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        print(
            "The interactive canvas needs PyQt6.  Install the 'gui' extras:\n"
            "  pip install linetool[gui]\n"
            "or compute points headlessly, e.g.\n"
            "  linetool --mode straight --start 0,0 --end 100,0",
            file=sys.stderr,
        )
        return 1

    from .gui.main_window import MainWindow

    app = QApplication(sys.argv)
    app.setApplicationName("Line Tool")
    app.setOrganizationName("linetool")
    app.setApplicationDisplayName("Line Tool - place objects along paths")

    window = MainWindow()
    window.show()

    return app.exec()
