import json
import logging

import pytest

from casus import config_manager
from casus.config_manager import ConfigManager
from casus.core.workspace import Workspace
from casus.logging_config import get_logger, setup_logging


@pytest.mark.unit
class TestConfigManager:
    """Tests for the JSON-backed settings."""

    def test_shipped_defaults(self):
        config = ConfigManager()
        assert config.get("connections.snap_radius") == 15
        assert config.get("connections.bump_delay_ms") == 250
        assert config.get("layout.rtl") is False

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "absent.json"))
        assert config.get("connections.snap_radius") == 15
        assert config.get("logging.level") == "INFO"

    def test_corrupt_file_uses_defaults(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        config = ConfigManager(str(path))
        assert config.get("connections.bump_delay_ms") == 250

    def test_get_missing_key_returns_default(self, config):
        assert config.get("connections.nope", 42) == 42
        assert config.get("layout.rtl.deeper") is None

    def test_set_creates_sections(self, config):
        assert config.set("editor.grid.spacing", 20)
        assert config.get("editor.grid.spacing") == 20

    def test_set_through_a_value_fails(self, config):
        assert not config.set("connections.snap_radius.inner", 1)

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = ConfigManager(str(path))
        config.set("connections.snap_radius", 25)
        assert config.save()

        assert json.loads(path.read_text())["connections"]["snap_radius"] == 25
        assert ConfigManager(str(path)).get("connections.snap_radius") == 25

    def test_validate(self, config):
        assert config.validate_config() == (True, [])
        config.set("connections.snap_radius", 0)
        config.set("connections.bump_delay_ms", -1)
        config.set("layout.rtl", "yes")
        valid, errors = config.validate_config()
        assert not valid
        assert len(errors) == 3

    def test_reset_to_defaults(self, config):
        config.set("connections.snap_radius", 99)
        config.reset_to_defaults()
        assert config.get("connections.snap_radius") == 15
        assert config.get_all()["layout"] == {"rtl": False}

    def test_apply_to_workspace(self, qapp, config):
        workspace = Workspace(config=config, timer=lambda delay, task: None)
        config.set("connections.snap_radius", 30)
        config.set("connections.bump_delay_ms", 50)
        config.set("layout.rtl", True)

        config.apply_to_workspace(workspace)

        assert workspace.snap_radius == 30
        assert workspace.bump_scheduler.delay_ms == 50
        assert workspace.rtl is True

    def test_workspace_reads_config(self, qapp, config):
        config.set("connections.snap_radius", 22)
        workspace = Workspace(config=config, timer=lambda delay, task: None)
        assert workspace.snap_radius == 22

    def test_reload_config_replaces_global(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_manager, "_global_config", None)
        first = config_manager.get_config()
        assert config_manager.get_config() is first

        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"connections": {"snap_radius": 40}}))
        reloaded = config_manager.reload_config(str(path))

        assert reloaded is not first
        assert config_manager.get_config().get("connections.snap_radius") == 40


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
class TestLoggingConfig:
    """Tests for logging setup driven by the editor configuration."""

    def test_setup_from_file(self, tmp_path, config):
        path = tmp_path / "logging.json"
        path.write_text(json.dumps({
            "version": 1,
            "disable_existing_loggers": False,
            "loggers": {"casus.test_marker": {"level": "ERROR"}},
        }))
        config.set("logging.log_to_file", False)
        config.set("logging.level", "warning")

        setup_logging(str(path), config)

        assert get_logger("casus.test_marker").level == logging.ERROR
        assert logging.getLogger().level == logging.WARNING

    def test_log_file_from_settings(self, tmp_path, config):
        log_file = tmp_path / "editor.log"
        config.set("logging.log_to_file", True)
        config.set("logging.log_file", str(log_file))
        config.set("logging.level", "DEBUG")

        setup_logging(config=config)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert [h.baseFilename for h in file_handlers] == [str(log_file)]
        get_logger("casus.core.connection").info("bumped")
        file_handlers[0].flush()
        assert "bumped" in log_file.read_text()

    def test_shipped_logging_config_quiets_the_index(self, config):
        config.set("logging.log_to_file", False)
        setup_logging(config=config)
        assert logging.getLogger("casus.core.connection_index").level == logging.WARNING
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_missing_file_falls_back_to_settings(self, tmp_path, config):
        config.set("logging.log_to_file", False)
        config.set("logging.level", "ERROR")

        setup_logging(str(tmp_path / "absent.json"), config)

        assert logging.getLogger().level == logging.ERROR
        assert logging.getLogger("casus_ui.interactions").level == logging.WARNING

    def test_unknown_level_uses_info(self, tmp_path, config):
        config.set("logging.log_to_file", False)
        config.set("logging.level", "chatty")

        setup_logging(str(tmp_path / "absent.json"), config)

        assert logging.getLogger().level == logging.INFO
