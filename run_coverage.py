"""
Coverage runner for the dumpapp client.
Runs the test suite under pytest-cov and optionally opens the HTML report.
"""

import argparse
import subprocess
import sys
import webbrowser
from pathlib import Path


def run_coverage(open_report: bool = False) -> int:
    """Run tests with coverage and generate reports; return pytest's exit status."""
    cmd = [
        sys.executable,
        "-m",
        "pytest",
        "--cov=dumpapp",
        "--cov-report=term-missing",
        "--cov-report=html",
    ]

    project_dir = Path(__file__).resolve().parent
    result = subprocess.run(cmd, check=False, cwd=str(project_dir))

    html_path = project_dir / "htmlcov" / "index.html"
    if result.returncode == 0 and open_report and html_path.exists():
        webbrowser.open(html_path.as_uri())
    return result.returncode


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the dumpapp tests with coverage")
    parser.add_argument("--open", action="store_true", help="Open the HTML report when tests pass")
    sys.exit(run_coverage(open_report=parser.parse_args().open))
