from __future__ import annotations

from rollcall.ui.cli import run

run()
