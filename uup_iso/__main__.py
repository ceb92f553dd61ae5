"""Allow running uup_iso as ``python -m uup_iso``."""

from uup_iso.cli import app

app(prog_name="uup-iso")
