"""dumpapp - command line client for Stetho's dumpapp protocol over adb."""

from dumpapp.cli import main as _cli_main

__all__ = ["__version__", "main"]
__version__ = "0.1.0"


def main() -> None:
	"""Entry point that mirrors :func:`dumpapp.cli.main`."""

	_cli_main()
