from medgraph.common.logger import configure_logging, logger


def test_configure_logging_filters_below_level():
    configure_logging("warning")
    records = []
    sink_id = logger.add(records.append, level="WARNING", format="{message}")
    try:
        logger.info("hidden")
        logger.warning("Snapshot not persisted")
    finally:
        logger.remove(sink_id)
        configure_logging("INFO")

    assert [str(r).strip() for r in records] == ["Snapshot not persisted"]
