import logging

import pytest

from confusionlab.logging_utils import DEFAULT_COLORS, ColoredFormatter, setup_colored_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_sets_level_and_single_handler(restore_root_logger):
    root = setup_colored_logging({"logging": {"level": "debug"}})
    assert root is restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, ColoredFormatter)

    # reconfiguring does not stack handlers
    setup_colored_logging({})
    assert len(root.handlers) == 1 and root.level == logging.INFO


def test_formatter_output_keeps_record_untouched():
    fmt = ColoredFormatter(colors={"info": "green"}, fmt="%(levelname)s %(funcName)s %(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None, func="fn")
    text = fmt.format(record)
    assert "INFO" in text and "fn" in text and text.endswith("hello world")
    assert record.levelname == "INFO" and record.funcName == "fn"


def test_formatter_merges_default_colors():
    fmt = ColoredFormatter(colors={"info": "white"})
    assert fmt.colors["info"] == "white"
    assert fmt.colors["error"] == DEFAULT_COLORS["error"]
    assert fmt.colors["function_names"] == DEFAULT_COLORS["function_names"]
