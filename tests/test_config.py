"""Tests for configuration and session files."""

import stat

from gotask import config as config_module
from gotask.config import Config, Session, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.conf")
        assert config == Config()
        assert config.firebase_database == "(default)"

    def test_parses_values(self, tmp_path):
        path = tmp_path / "gotask.conf"
        path.write_text(
            "# Go Task\n"
            "\n"
            'FIREBASE_PROJECT_ID = "go-task-demo"  # project\n'
            "DATA_DIR = ~/tasks # where\n"
            "SAVE_DELAY = 0.5\n"
            "REMOTE_TIMEOUT = 10\n"
            "not a setting\n"
            "UNKNOWN = x\n"
        )

        config = load_config(path)

        assert config.firebase_project_id == "go-task-demo"
        assert config.data_dir == "~/tasks"
        assert config.save_delay == 0.5
        assert config.remote_timeout == 10.0

    def test_invalid_number_keeps_default(self, tmp_path):
        path = tmp_path / "gotask.conf"
        path.write_text("SAVE_DELAY = soon\n")
        assert load_config(path).save_delay == 0.0

    def test_empty_database_falls_back(self, tmp_path):
        path = tmp_path / "gotask.conf"
        path.write_text("FIREBASE_DATABASE =\n")
        assert load_config(path).firebase_database == "(default)"


class TestDataPath:
    def test_configured(self):
        assert "~" not in str(Config(data_dir="~/tasks").data_path)

    def test_default(self):
        assert Config().data_path == config_module.DATA_DIR


class TestSession:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "config" / ".session.json"
        Session(user_id="u1", id_token="tok").save(path)

        loaded = Session.load(path)

        assert loaded.user_id == "u1"
        assert loaded.id_token == "tok"
        assert loaded.current_user_id == "u1"

    def test_saved_with_private_permissions(self, tmp_path):
        path = tmp_path / ".session.json"
        Session(user_id="u1", id_token="tok").save(path)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_missing_file_is_offline(self, tmp_path):
        session = Session.load(tmp_path / "none.json")
        assert session.current_user_id is None

    def test_unreadable_file_is_offline(self, tmp_path):
        path = tmp_path / ".session.json"
        path.write_text("{broken")
        assert Session.load(path).current_user_id is None

    def test_clear(self, tmp_path):
        path = tmp_path / ".session.json"
        Session(user_id="u1").save(path)
        Session.clear(path)
        assert not path.exists()
        Session.clear(path)

    def test_uses_module_path(self, tmp_path, monkeypatch):
        path = tmp_path / ".session.json"
        monkeypatch.setattr(config_module, "SESSION_FILE", path)
        Session(user_id="u2").save()
        assert Session.load().user_id == "u2"
