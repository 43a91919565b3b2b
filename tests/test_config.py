import logging

from todayaim import config
from todayaim.model import FilterCriterion


def test_default_config_is_written(temp_config):
    assert config.load_config() == {}
    assert temp_config.exists()
    assert "TodayAim Configuration" in temp_config.read_text()


def test_defaults(temp_config):
    assert config.get_default_filter() is FilterCriterion.ALL
    assert config.get_delete_delay() == 0.4
    assert config.get_first_weekday() == 6


def test_values_from_file(temp_config):
    temp_config.parent.mkdir(parents=True)
    temp_config.write_text(
        'default_filter = "favorited"\ndelete_delay = 1.5\nfirst_weekday = 0\neditor = "nano"\n')
    assert config.get_default_filter() is FilterCriterion.FAVORITED
    assert config.get_delete_delay() == 1.5
    assert config.get_first_weekday() == 0
    assert config.get_editor() == "nano"


def test_bad_values_fall_back(temp_config, caplog):
    temp_config.parent.mkdir(parents=True)
    temp_config.write_text(
        'default_filter = "starred"\ndelete_delay = "soon"\nfirst_weekday = 9\n')
    with caplog.at_level(logging.WARNING, logger="todayaim.config"):
        assert config.get_default_filter() is FilterCriterion.ALL
    assert "Unknown filter 'starred'" in caplog.text
    assert config.get_delete_delay() == 0.4
    assert config.get_first_weekday() == 6


def test_broken_toml_reads_as_empty(temp_config):
    temp_config.parent.mkdir(parents=True)
    temp_config.write_text("default_filter = \n")
    assert config.load_config() == {}


def test_setup_logging_writes_to_file(temp_config, tmp_path):
    log_file = tmp_path / "logs" / "todayaim.log"
    handler = config.setup_logging("INFO", str(log_file))
    try:
        logging.getLogger("todayaim.test").info("hello log")
        handler.flush()
        assert "INFO todayaim.test: hello log" in log_file.read_text()
    finally:
        logging.getLogger("todayaim").removeHandler(handler)
        handler.close()
