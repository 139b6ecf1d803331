"""
Test suites package.

`testsuites` stays importable so that:
  - the UI framework (`testsuites.ui_testing.framework`) can be imported by tests
  - `run_tests.py` and CI jobs can address suites by module path

All content targets the public sample store and holds no secrets.
"""
