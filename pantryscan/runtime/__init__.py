"""Runtime infrastructure for pantryscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path and service URL resolution via get_paths(), get_service_urls()
- Rule loading via load_parser_vocabulary(), load_category_rule_layers()

Usage:
    from pantryscan.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.config)
"""

from pantryscan.runtime.item_category_rules import load_category_rule_layers
from pantryscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from pantryscan.runtime.paths import (
    ProjectPaths,
    ServiceUrls,
    get_paths,
    get_service_urls,
    reset_paths,
)
from pantryscan.runtime.vocabulary_rules import load_parser_vocabulary

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_parser_vocabulary",
    "load_category_rule_layers",
    # Paths
    "get_paths",
    "reset_paths",
    "get_service_urls",
    "ProjectPaths",
    "ServiceUrls",
]
