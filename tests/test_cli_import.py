"""Regression tests for importing the storage layer without the web stack."""

from __future__ import annotations

import importlib
import sys
import unittest


class CLIImportTests(unittest.TestCase):
    def setUp(self) -> None:
        self._saved = {
            name: module
            for name, module in sys.modules.items()
            if name in {"fastapi", "sqlalchemy"} or name == "userapi" or name.startswith("userapi.")
        }

    def tearDown(self) -> None:
        for name in [m for m in list(sys.modules.keys()) if m == "userapi" or m.startswith("userapi.")]:
            sys.modules.pop(name, None)
        sys.modules.pop("fastapi", None)
        sys.modules.pop("sqlalchemy", None)
        sys.modules.update(self._saved)

    def test_import_memory_backend_without_web_or_sql_packages(self) -> None:
        """Importing userapi.memory should not pull in FastAPI or SQLAlchemy."""

        for name in [m for m in list(sys.modules.keys()) if m == "userapi" or m.startswith("userapi.")]:
            sys.modules.pop(name, None)
        sys.modules["fastapi"] = None
        sys.modules["sqlalchemy"] = None

        memory_module = importlib.import_module("userapi.memory")
        self.assertTrue(hasattr(memory_module, "InMemoryRepository"))

        package = sys.modules.get("userapi")
        self.assertIsNotNone(package)
        self.assertTrue(hasattr(package, "Repository"))
        self.assertEqual(len(memory_module.InMemoryRepository().get_users()), 3)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
