# armory_scout/browser/launch.py
"""Launch options for the current execution context."""
from __future__ import annotations

from armory_scout.browser.base import LaunchOptions
from armory_scout.config import ServiceConfig

__all__ = ["launch_options_for", "SERVERLESS_ARGS"]

SERVERLESS_ARGS = (
    "--hide-scrollbars",
    "--disable-web-security",
    "--disable-gpu",
    "--single-process",
    "--no-zygote",
    "--no-sandbox",
)


def launch_options_for(config: ServiceConfig) -> LaunchOptions:
    """Bundled lightweight Chromium in serverless mode, local Playwright Chromium otherwise."""
    if config.serverless:
        return LaunchOptions(
            headless=True,
            args=SERVERLESS_ARGS,
            executable_path=config.chromium_executable,
            ignore_https_errors=True,
        )
    return LaunchOptions(
        headless=config.headless,
        executable_path=config.chromium_executable,
    )
