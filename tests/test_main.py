"""
Tests for command-line configuration and entry-point error handling.
"""
from unittest.mock import patch

import pytest

from rotator import main as entry


class TestConfig:
    def test_loop_defaults(self):
        config = entry.get_config(["loop"])
        assert config["command"] == "loop"
        assert config["threads"] == 3
        assert config["exclude"] == []
        assert config["max_gas_gwei"] is None
        assert config["round_delay"] == entry.ROUND_DELAY

    def test_loop_options(self):
        config = entry.get_config(
            ["loop", "--threads", "10", "--exclude", "Alpha", "--exclude", "Beta",
             "--max-gas-gwei", "12.5", "--max-rounds", "4"]
        )
        assert config["threads"] == 10
        assert config["exclude"] == ["Alpha", "Beta"]
        assert config["max_gas_gwei"] == 12.5
        assert config["max_rounds"] == 4

    @pytest.mark.parametrize("threads", ["0", "11", "abc"])
    def test_threads_out_of_range(self, threads):
        with pytest.raises(SystemExit):
            entry.get_config(["loop", "--threads", threads])

    def test_sweep(self):
        config = entry.get_config(["--modules", "m.json", "sweep", "--max-concurrent", "4"])
        assert config["modules"] == "m.json"
        assert config["max_concurrent"] == 4

    def test_command_required(self):
        with pytest.raises(SystemExit):
            entry.get_config([])

    def test_read_roster(self, tmp_path):
        path = tmp_path / "roster.txt"
        path.write_text("# mine\n0xabc\n\n0xdef\n")
        assert entry.read_roster(str(path)) == ["0xabc", "0xdef"]


class TestMain:
    """Fatal errors end the process with status 1."""

    def test_missing_credentials_exit(self, tmp_path):
        argv = ["--keys", str(tmp_path / "none.txt"),
                "--keystore", str(tmp_path / "none.json"), "loop"]
        with patch.object(entry, "configure_logging"), pytest.raises(SystemExit) as exc:
            entry.main(argv)
        assert exc.value.code == 1

    def test_password_mismatch_exit(self, tmp_path):
        argv = ["--keys", str(tmp_path / "k.txt"), "encrypt-keys"]
        with patch.object(entry, "configure_logging"), patch(
            "rotator.main.getpass.getpass", side_effect=["one", "two"]
        ), pytest.raises(SystemExit) as exc:
            entry.main(argv)
        assert exc.value.code == 1

    def test_keyboard_interrupt_is_clean(self):
        with patch.object(entry, "configure_logging"), patch.object(
            entry, "get_config", side_effect=KeyboardInterrupt
        ):
            entry.main(["loop"])

