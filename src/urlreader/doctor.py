"""Diagnostic tool for verifying urlreader installation and dependencies."""

import asyncio
import socket
import sys
from importlib import import_module
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table


def check_dependency(
    module_name: str, package_name: Optional[str] = None, optional: bool = False
) -> tuple[bool, str]:
    """
    Check if a Python module is importable.

    Args:
        module_name: Name of the module to import
        package_name: Display name of the package (defaults to module_name)
        optional: Whether this is an optional dependency

    Returns:
        Tuple of (success: bool, message: str)
    """
    display_name = package_name or module_name

    try:
        import_module(module_name)
        return True, f"[OK] {display_name}"
    except ImportError:
        if optional:
            return False, f"[WARN] {display_name} (optional - not installed)"
        return False, f"[MISSING] {display_name}"


def check_network(host: str = "example.com") -> tuple[bool, str]:
    """Check that DNS resolution works."""
    try:
        socket.gethostbyname(host)
        return True, "[OK] Network connectivity"
    except socket.gaierror:
        return False, "[FAIL] Network connectivity - DNS resolution failed"
    except OSError as e:
        return False, f"[WARN] Network connectivity - {e}"


async def _bundled_chromium_path() -> str:
    from playwright.async_api import async_playwright

    async with async_playwright() as playwright:
        return playwright.chromium.executable_path


def check_browser(executable_path: Optional[Path] = None) -> tuple[bool, str]:
    """
    Check that a Chromium binary is available for rendering.

    Args:
        executable_path: Configured override (OVERRIDE_CHROME_EXECUTABLE_PATH)
    """
    if executable_path is not None:
        if executable_path.exists():
            return True, f"[OK] Chromium override ({executable_path})"
        return False, f"[FAIL] Chromium override not found ({executable_path})"

    try:
        bundled = Path(asyncio.run(_bundled_chromium_path()))
    except ImportError:
        return False, "[FAIL] Chromium - playwright is not installed"
    except Exception as e:
        return False, f"[FAIL] Chromium - {e}"

    if bundled.exists():
        return True, f"[OK] Chromium ({bundled})"
    return False, "[FAIL] Chromium not installed - run: playwright install chromium"


def run_doctor(executable_path: Optional[Path] = None) -> int:
    """
    Run diagnostic checks and display results.

    Args:
        executable_path: Chromium override to check instead of the bundled browser

    Returns:
        Exit code (0 if core dependencies and the browser are OK, 1 otherwise)
    """
    console = Console()
    console.print("Running urlreader diagnostics...\n")

    core_checks = [
        ("aiohttp", "aiohttp"),
        ("bs4", "beautifulsoup4"),
        ("html2text", "html2text"),
        ("pypdf", "pypdf"),
        ("playwright.async_api", "playwright"),
        ("pydantic", "pydantic"),
        ("dotenv", "python-dotenv"),
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("rich", "rich"),
    ]
    optional_checks = [
        ("yaml", "pyyaml", True),
    ]

    core_results = [check_dependency(mod, pkg) for mod, pkg in core_checks]
    optional_results = [check_dependency(mod, pkg, opt) for mod, pkg, opt in optional_checks]
    system_results = [
        check_browser(executable_path),
        check_network(),
    ]

    all_checks = {
        "Core Dependencies": core_results,
        "Optional Dependencies": optional_results,
        "System": system_results,
    }

    for category, results in all_checks.items():
        table = Table(title=category, show_header=False, box=None)
        table.add_column("Status", style="bold")

        for success, message in results:
            style = "green" if success else ("yellow" if "optional" in message else "red")
            table.add_row(message, style=style)

        console.print(table)
        console.print()

    core_failed = any(not success for success, _ in core_results)
    browser_ok = system_results[0][0]

    if core_failed:
        console.print("[red]WARNING: Some core dependencies are missing![/red]")
        console.print("\nRecommended fixes:")
        console.print("  1. For pip users: pip install --upgrade --force-reinstall urlreader")
        console.print("  2. For development: pip install -e .[dev]")
        return 1

    if not browser_ok:
        console.print("[red]WARNING: No Chromium available for page rendering.[/red]")
        console.print("\nInstall one with: playwright install chromium")
        console.print("or point OVERRIDE_CHROME_EXECUTABLE_PATH at an existing binary.")
        return 1

    console.print("[green]All core dependencies installed correctly![/green]")
    if any(not success for success, _ in optional_results):
        console.print("\nOptional features available:")
        console.print("  - YAML config support: pip install urlreader[yaml]")
    return 0


if __name__ == "__main__":
    sys.exit(run_doctor())
