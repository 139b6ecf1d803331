"""
================================================================================
Shopauto Tools
================================================================================

Shared infrastructure for the e-commerce UI automation framework.

Modules:
    - common: Configuration loading (YAML + environment) and loguru setup
    - report_tools: Allure attachment helpers

Example:
    from shopauto_tools.common import get_config, init_logger

    init_logger()
    timeout = get_config("ui.timeout", 10)

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
