"""Diagnostic tool for verifying the webcapture installation."""

import sys
from importlib import import_module
from pathlib import Path
from typing import Optional

try:
    from rich.console import Console
    from rich.table import Table

    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False
    Console = None  # type: ignore
    Table = None  # type: ignore

CORE_DEPENDENCIES = [
    ("aiohttp", "aiohttp"),
    ("bs4", "beautifulsoup4"),
    ("html2text", "html2text"),
    ("pydantic", "pydantic"),
    ("charset_normalizer", "charset-normalizer"),
    ("rich", "rich"),
]

OPTIONAL_DEPENDENCIES = [
    ("yaml", "pyyaml", "YAML config support: pip install web-capture[yaml]"),
    ("pyppeteer", "pyppeteer", "puppeteer engine: pip install web-capture[puppeteer]"),
    ("playwright.async_api", "playwright", "playwright engine: pip install web-capture[playwright]"),
]


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


def check_browser_engines() -> tuple[bool, str]:
    """Check that at least one browser engine library is installed."""
    from .browser import PLAYWRIGHT_AVAILABLE, PYPPETEER_AVAILABLE

    engines = [
        name
        for name, available in (("puppeteer", PYPPETEER_AVAILABLE), ("playwright", PLAYWRIGHT_AVAILABLE))
        if available
    ]
    if engines:
        return True, f"[OK] Browser engines: {', '.join(engines)}"
    return False, "[WARN] No browser engine installed - /image and script-heavy /html captures will fail"


def check_output_dir(output_dir: Optional[Path] = None) -> tuple[bool, str]:
    """
    Check that captures can be written to ``output_dir``.

    Args:
        output_dir: Directory to check (defaults to the working directory,
            where screenshots land when no --output is given)
    """
    test_dir = output_dir or Path.cwd()
    test_file = test_dir / ".webcapture_test"

    try:
        test_file.write_text("test")
        test_file.unlink()
        return True, f"[OK] Output directory writable ({test_dir})"
    except PermissionError:
        return False, f"[FAIL] Output directory - permission denied ({test_dir})"
    except OSError as e:
        return False, f"[FAIL] Output directory - {e} ({test_dir})"


def run_doctor(output_dir: Optional[Path] = None, use_rich: bool = True) -> int:
    """
    Run diagnostic checks and display results.

    Returns:
        Exit code (0 if all core dependencies OK, 1 if any core dependency missing)
    """
    use_rich = use_rich and RICH_AVAILABLE

    print("Running webcapture diagnostics...\n")

    core_results = [check_dependency(mod, pkg) for mod, pkg in CORE_DEPENDENCIES]
    optional_results = [check_dependency(mod, pkg, optional=True) for mod, pkg, _ in OPTIONAL_DEPENDENCIES]

    all_checks = {
        "Core Dependencies": core_results,
        "Optional Dependencies": optional_results,
        "System": [check_browser_engines(), check_output_dir(output_dir)],
    }

    if use_rich:
        console = Console()

        for category, results in all_checks.items():
            table = Table(title=category, show_header=False, box=None)
            table.add_column("Status", style="bold")

            for success, message in results:
                style = "green" if success else ("yellow" if message.startswith("[WARN]") else "red")
                table.add_row(message, style=style)

            console.print(table)
            console.print()
    else:
        for category, results in all_checks.items():
            print(f"{category}:")
            for _success, message in results:
                print(f"  {message}")
            print()

    if any(not success for success, _ in core_results):
        print("\nWARNING: Some core dependencies are missing!")
        print("\nRecommended fixes:")
        print("  1. For pip users: pip install --upgrade --force-reinstall web-capture")
        print("  2. For development: pip install -e .[dev]")
        return 1

    print("\nAll core dependencies installed correctly!")

    hints = [
        hint
        for (success, _), (_, _, hint) in zip(optional_results, OPTIONAL_DEPENDENCIES)
        if not success
    ]
    if hints:
        print("\nOptional features available:")
        for hint in hints:
            print(f"  - {hint}")
        print("  - All optional features: pip install web-capture[all]")

    return 0


if __name__ == "__main__":
    sys.exit(run_doctor())
