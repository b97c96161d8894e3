import sys
import os
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main


class TestMain:
    def test_example_from_requirements(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "deposit, 2, 2, 2.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
        ]))

        assert main.main(["main.py", str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out == (
            "client,available,held,total,locked\n"
            "1,1.5,0,1.5,false\n"
            "2,2,0,2,false\n"
        )
        assert "Processed: 4, Failed: 1" in captured.err

    def test_undecodable_row_skipped(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_bytes(
            b"type, client, tx, amount\n"
            b"deposit, 1, 1, 1.0\n"
            b"deposit, 2, 2, 3\xff\n"
            b"deposit, 3, 3, 2.0\n"
        )

        assert main.main(["main.py", str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out == (
            "client,available,held,total,locked\n"
            "1,1,0,1,false\n"
            "3,2,0,2,false\n"
        )
        assert "Processed: 2, Failed: 1" in captured.err

    def test_usage(self, capsys):
        assert main.main(["main.py"]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main.main(["main.py", str(tmp_path / "missing.csv")]) == 1
        assert "Cannot read" in capsys.readouterr().err


class TestConfigureLogging:
    def setup_method(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level
        self.root.handlers = []

    def teardown_method(self):
        self.root.handlers = self.saved_handlers
        self.root.setLevel(self.saved_level)

    def test_default_level(self, monkeypatch):
        monkeypatch.delenv(main.LOG_LEVEL_ENV, raising=False)
        main.configure_logging()
        assert self.root.level == logging.WARNING

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(main.LOG_LEVEL_ENV, "debug")
        main.configure_logging()
        assert self.root.level == logging.DEBUG

    def test_invalid_level_falls_back(self, monkeypatch):
        monkeypatch.setenv(main.LOG_LEVEL_ENV, "chatty")
        main.configure_logging()
        assert self.root.level == logging.WARNING
