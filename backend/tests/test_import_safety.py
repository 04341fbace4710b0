"""
test_import_safety.py — Import and layering checks.

Verifies that:
  1. Every service module imports without ImportError or circular-import failures
     (no DB connection is made; the async engine is created lazily).
  2. The pure pricing engines do not drag in the database layer, so they can
     be used from any host without SQLAlchemy configured.
"""

import sys
import os
import subprocess
import importlib
import pytest

_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

_PURE_MODULES = [
    "app.services.pricing_config",
    "app.models.pricing_schema",
    "app.services.rate_calculator",
    "app.services.formula_parser",
    "app.services.area_engine",
    "app.services.hardware_engine",
    "app.services.cabinet_costing_engine",
    "app.services.joinery_costing_engine",
    "app.services.quote_costing_engine",
]

_HOST_MODULES = [
    "app.db",
    "app.models.orm_models",
    "app.services.quote_recalculation",
    "app.services.logging_config",
    "app.services.middleware",
    "app.api.pricing_routes",
    "app.api.settings_routes",
    "app.main",
]


class TestModuleImports:

    @pytest.mark.parametrize("module", _PURE_MODULES + _HOST_MODULES)
    def test_module_imports(self, module):
        assert importlib.import_module(module) is not None


class TestLayering:

    def test_pure_engines_do_not_import_db_layer(self):
        """Import every engine in a fresh interpreter and inspect sys.modules."""
        code = (
            "import sys\n"
            + "".join(f"import {m}\n" for m in _PURE_MODULES)
            + "leaked = [m for m in ('app.db', 'app.models.orm_models', 'sqlalchemy') if m in sys.modules]\n"
            + "print(','.join(leaked))\n"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=_BACKEND_DIR,
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == ""
