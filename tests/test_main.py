"""
Tests for the command-line driver
"""

import logging

import pytest

from hashring import main as cli
from hashring.main import setup_logging


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep the CLI from attaching handlers to the root logger"""
    monkeypatch.setattr(cli, "setup_logging", lambda level, log_file=None: None)


class TestLookup:
    """Test the lookup command"""

    def test_lookup(self, capsys):
        """Test that each key is printed with its owner"""
        assert cli.main(["--nodes", "A,B", "-r", "3", "lookup", "k1", "k2"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("k1 -> ")
        assert lines[1].split(" -> ")[1] in ("A", "B")

    def test_lookup_empty_ring(self, capsys):
        """Test output when no nodes are configured"""
        assert cli.main(["lookup", "k1"]) == 0
        assert capsys.readouterr().out.strip() == "k1 -> <none>"

    def test_lookup_from_config(self, tmp_path, capsys):
        """Test nodes loaded from a config file"""
        path = tmp_path / "ring.yaml"
        path.write_text("replicas: 2\nnodes: [only]\n")

        assert cli.main(["--config", str(path), "lookup", "x"]) == 0
        assert capsys.readouterr().out.strip() == "x -> only"

    def test_invalid_replicas(self, capsys):
        """Test that a bad replica count exits with status 1"""
        assert cli.main(["--nodes", "A", "--replicas", "0", "lookup", "k"]) == 1
        assert capsys.readouterr().out == ""

    def test_repeated_keys(self, capsys):
        """Test that every requested key gets its own line, in order"""
        assert cli.main(["--nodes", "A,B", "lookup", "k", "j", "k"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert [line.split(" -> ")[0] for line in lines] == ["k", "j", "k"]
        assert lines[0] == lines[2]


class TestConfigErrors:
    """Test that bad configuration exits with status 1 instead of raising"""

    def test_env_replicas_not_integer(self, monkeypatch, capsys):
        """Test a non-numeric HASHRING_REPLICAS"""
        monkeypatch.setenv("HASHRING_REPLICAS", "three")

        assert cli.main(["--nodes", "A", "lookup", "k"]) == 1
        assert capsys.readouterr().out == ""

    def test_yaml_not_a_mapping(self, tmp_path):
        """Test a YAML file whose top level is a list"""
        path = tmp_path / "ring.yaml"
        path.write_text("- a\n- b\n")

        assert cli.main(["--config", str(path), "lookup", "k"]) == 1

    def test_yaml_parse_error(self, tmp_path):
        """Test a YAML file that does not parse"""
        path = tmp_path / "ring.yaml"
        path.write_text("replicas: [\n")

        assert cli.main(["--config", str(path), "lookup", "k"]) == 1

    def test_error_is_logged(self, monkeypatch, caplog):
        """Test that the failure reason reaches the log"""
        monkeypatch.setenv("HASHRING_REPLICAS", "three")

        with caplog.at_level(logging.ERROR):
            cli.main(["lookup", "k"])

        assert any("HASHRING_REPLICAS" in r.getMessage() for r in caplog.records)

    def test_critical_log_level_accepted(self, capsys):
        """Test that every valid log level can be given on the command line"""
        assert cli.main(["--log-level", "CRITICAL", "--nodes", "A", "lookup", "k"]) == 0
        assert capsys.readouterr().out.strip() == "k -> A"


class TestSimulate:
    """Test the simulate command"""

    def test_distribution_only(self, capsys):
        """Test simulate without membership changes"""
        assert cli.main(["-n", "A,B,C", "-r", "10", "simulate", "--keys", "500",
                         "--seed", "1"]) == 0

        out = capsys.readouterr().out
        assert "Initial distribution:" in out
        assert "Final distribution:" not in out

    def test_add_and_remove(self, capsys):
        """Test simulate with membership changes"""
        assert cli.main(["-n", "Node1,Node2,Node3,Node4,Node5", "-r", "3",
                         "simulate", "--keys", "1000", "--seed", "42",
                         "--add", "Node6", "--remove", "Node3"]) == 0

        out = capsys.readouterr().out
        assert "Added Node6" in out
        assert "Removed Node3" in out
        assert "Final distribution:" in out
        assert "Moved keys:" in out
        assert "  Node3:" not in out.split("Final distribution:")[1]


class TestSetupLogging:
    """Test logging configuration"""

    def test_log_file(self, tmp_path):
        """Test that a file handler writes to the requested path"""
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        log_file = tmp_path / "logs" / "ring.log"

        try:
            setup_logging("DEBUG", str(log_file))
            logging.getLogger("hashring.test").info("hello")
        finally:
            for handler in root.handlers[:]:
                if handler not in handlers:
                    handler.close()
                    root.removeHandler(handler)
            root.setLevel(level)

        assert "hello" in log_file.read_text()
