import logging

from bzpath import BezierPath, setup_logging


def test_setup_logging_does_not_duplicate_handlers(tmp_path) -> None:
    log_file = tmp_path / "bzpath.log"

    setup_logging(logging.DEBUG)
    logger = setup_logging(logging.DEBUG, log_file=str(log_file))

    assert logger.name == "bzpath"
    assert len(logger.handlers) == 2

    path = BezierPath()
    path.add_segment((0.0, 0.0, 0.0))
    path.add_segment((1.0, 0.0, 0.0))
    for handler in logger.handlers:
        handler.flush()

    assert "Added segment 0" in log_file.read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
