#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Logging and Configuration Tests
================================================================================

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
License:        MIT License
================================================================================
"""

import json
import logging
import logging.handlers
import pytest
from src.utils import load_config, setup_logging


class TestLoadConfig:
    """Tests for JSON configuration files."""

    def test_load(self, tmp_path):
        """Settings in the file override the defaults."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"temperature": 500, "num_molecules": 80, "seed": 3}))

        config = load_config(str(path))

        assert config.temperature == 500
        assert config.num_molecules == 80
        assert config.seed == 3
        assert config.substeps == 3

    def test_missing_file(self, tmp_path):
        """A missing file is reported and re-raised."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        """Malformed JSON is re-raised."""
        path = tmp_path / "broken.json"
        path.write_text("{temperature: ")
        with pytest.raises(json.JSONDecodeError):
            load_config(str(path))

    def test_invalid_setting(self, tmp_path):
        """Out-of-range settings raise ValueError."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"substeps": 0}))
        with pytest.raises(ValueError):
            load_config(str(path))


class TestSetupLogging:
    """Tests for logger configuration."""

    def test_console_only(self):
        """Without a file only the console handler is installed."""
        setup_logging("debug")
        root = logging.getLogger()

        try:
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert not isinstance(root.handlers[0], logging.handlers.RotatingFileHandler)
        finally:
            root.handlers.clear()
            root.setLevel(logging.WARNING)

    def test_rotating_file(self, tmp_path):
        """A log file adds a rotating handler and creates its directory."""
        log_file = tmp_path / "logs" / "gas.log"
        setup_logging("INFO", str(log_file))
        root = logging.getLogger()

        try:
            assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
            logging.getLogger("src.simulation").info("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers.clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
