"""
Unit tests for config.py

Tests defaults, YAML loading, validation and environment overrides.
"""

import logging
import os
import tempfile
import unittest
from unittest import mock

from wasmbind.config import (
    BindgenConfig,
    config_from_dict,
    load_config,
    load_config_file,
    resolve_log_level,
)
from wasmbind.errors import ConfigValidationError


class _WorkdirTestCase(unittest.TestCase):
    """Runs each test in an empty working directory with a clean environment."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        cwd = os.getcwd()
        os.chdir(self.tmp.name)
        self.addCleanup(os.chdir, cwd)

        env = mock.patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        for name in ("WASMBIND_LOG_LEVEL", "WASMBIND_OBJDUMP"):
            os.environ.pop(name, None)

    def write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path


class TestDefaults(unittest.TestCase):
    """Test default values."""

    def test_defaults(self):
        config = BindgenConfig()
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.parse.export_macro, "HAKO_EXPORT")
        self.assertEqual(config.parse.doc_marker, "//!")
        self.assertEqual(config.parse.reserved_exports, ["malloc", "free"])
        self.assertEqual(config.csharp.namespace, "HakoJS.Host")
        self.assertEqual(config.csharp.dispatcher, "Hako.Dispatcher.Invoke")
        self.assertEqual(config.toolchain.objdump, "wasm-objdump")
        self.assertEqual(config.log_level_value, logging.INFO)

    def test_resolve_log_level(self):
        self.assertEqual(resolve_log_level("debug"), logging.DEBUG)
        with self.assertRaises(ConfigValidationError):
            resolve_log_level("chatty")


class TestConfigFromDict(unittest.TestCase):
    """Test validation of parsed config mappings."""

    def test_partial_sections_keep_defaults(self):
        config = config_from_dict({
            "log_level": "DEBUG",
            "csharp": {"namespace": "My.Ns"},
            "parse": {"reserved_exports": ["malloc"]},
        })
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.csharp.namespace, "My.Ns")
        self.assertEqual(config.csharp.class_name, "HakoRegistry")
        self.assertEqual(config.parse.reserved_exports, ["malloc"])
        self.assertEqual(config.toolchain.git, "git")

    def test_unknown_top_level_key(self):
        with self.assertRaises(ConfigValidationError):
            config_from_dict({"rust": {}})

    def test_unknown_section_key(self):
        with self.assertRaises(ConfigValidationError) as ctx:
            config_from_dict({"csharp": {"namspace": "x"}})
        self.assertIn("namspace", str(ctx.exception))

    def test_section_must_be_mapping(self):
        with self.assertRaises(ConfigValidationError):
            config_from_dict({"parse": ["HAKO_EXPORT"]})

    def test_wrong_value_types(self):
        with self.assertRaises(ConfigValidationError):
            config_from_dict({"toolchain": {"objdump": 5}})
        with self.assertRaises(ConfigValidationError):
            config_from_dict({"csharp": {"usings": "System.IO"}})
        with self.assertRaises(ConfigValidationError):
            config_from_dict({"log_level": 10})


class TestLoadConfig(_WorkdirTestCase):
    """Test loading from files and the environment."""

    def test_no_file_gives_defaults(self):
        self.assertEqual(load_config(), BindgenConfig())

    def test_explicit_yaml_file(self):
        path = self.write(
            "custom.yaml",
            "log_level: WARNING\n"
            "parse:\n"
            "  export_macro: MY_EXPORT\n"
            "toolchain:\n"
            "  objdump: /opt/wabt/bin/wasm-objdump\n",
        )
        config = load_config(path)
        self.assertEqual(config.log_level_value, logging.WARNING)
        self.assertEqual(config.parse.export_macro, "MY_EXPORT")
        self.assertEqual(config.toolchain.objdump, "/opt/wabt/bin/wasm-objdump")

    def test_default_file_in_working_directory(self):
        self.write("wasmbind.yaml", "csharp:\n  class_name: Registry\n")
        self.assertEqual(load_config().csharp.class_name, "Registry")

    def test_empty_file(self):
        path = self.write("empty.yaml", "")
        self.assertEqual(load_config(path), BindgenConfig())

    def test_invalid_yaml(self):
        path = self.write("bad.yaml", "parse: [unclosed\n")
        with self.assertRaises(ConfigValidationError):
            load_config_file(path)

    def test_non_mapping_payload(self):
        path = self.write("list.yaml", "- a\n- b\n")
        with self.assertRaises(ConfigValidationError):
            load_config_file(path)

    def test_non_utf8_file(self):
        path = os.path.join(self.tmp.name, "latin1.yaml")
        with open(path, "wb") as f:
            f.write(b"csharp:\n  namespace: Caf\xe9\n")
        with self.assertRaises(ConfigValidationError) as ctx:
            load_config_file(path)
        self.assertIn("latin1.yaml", str(ctx.exception))

    def test_missing_file(self):
        with self.assertRaises(ConfigValidationError):
            load_config(os.path.join(self.tmp.name, "absent.yaml"))

    def test_environment_overrides(self):
        path = self.write("c.yaml", "log_level: INFO\ntoolchain:\n  objdump: from-file\n")
        os.environ["WASMBIND_LOG_LEVEL"] = "ERROR"
        os.environ["WASMBIND_OBJDUMP"] = "from-env"
        config = load_config(path)
        self.assertEqual(config.log_level, "ERROR")
        self.assertEqual(config.toolchain.objdump, "from-env")

    def test_dotenv_file(self):
        self.write(".env", "WASMBIND_OBJDUMP=/usr/local/bin/wasm-objdump\n")
        self.assertEqual(load_config().toolchain.objdump, "/usr/local/bin/wasm-objdump")

    def test_invalid_level_from_environment(self):
        os.environ["WASMBIND_LOG_LEVEL"] = "loud"
        with self.assertRaises(ConfigValidationError):
            load_config()


if __name__ == "__main__":
    unittest.main()
