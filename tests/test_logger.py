import logging

from agentshot.logger import SecurityFormatter, get_logger, sanitize_for_logging, setup_logger


def test_sanitize_masks_tokens():
    message = "using key sk-ant-abc123DEF456 and ghp_abcdefghijklmnop for claude -p <prompt>"

    sanitized = sanitize_for_logging(message)

    assert "sk-ant" not in sanitized
    assert "ghp_" not in sanitized
    assert sanitized.count("[REDACTED]") == 2
    assert sanitized.endswith("for claude -p <prompt>")


def test_sanitize_truncates_long_messages():
    sanitized = sanitize_for_logging("word " * 1000)

    assert sanitized.endswith("...")
    assert len(sanitized) < 2100


def test_security_formatter_masks_arguments():
    formatter = SecurityFormatter("%(message)s")
    record = logging.LogRecord(
        "agentshot.executor", logging.DEBUG, __file__, 1,
        "Spawning one-shot process: %s", ("tool --api-key sk-secretvalue <prompt>",), None,
    )

    assert formatter.format(record) == "Spawning one-shot process: tool --api-key [REDACTED] <prompt>"


def test_get_logger_is_child_of_package_logger():
    assert get_logger("executor").name == "agentshot.executor"


def test_setup_logger_installs_single_handler(tmp_path):
    log_file = tmp_path / "logs" / "agentshot.log"
    logger = setup_logger("agentshot.test", level="debug", log_file=log_file)
    setup_logger("agentshot.test", level="debug", log_file=log_file)

    logger.debug("hello %s", "world")
    logger.debug("using key %s", "sk-ant-abc123DEF456")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    written = log_file.read_text(encoding="utf-8")
    assert "hello world" in written
    assert "using key [REDACTED]" in written
    for handler in logger.handlers:
        handler.close()
