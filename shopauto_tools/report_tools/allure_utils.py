"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers for enriching Allure test results with diagnostics
produced by the framework, such as exhausted retry summaries.

Outside of a pytest run with the allure plugin enabled these helpers are
no-ops, so framework code can call them unconditionally.

================================================================================
"""

import json
from typing import Any

import allure


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


__all__ = [
    "attach_json",
]
