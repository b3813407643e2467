#!/usr/bin/env python3
"""Standalone outline script - indexes a repository, writes the report and exits."""

import logging
import os
import sys

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Main outline function."""
    # Import here to avoid issues if running from different context
    from codebrev.config import get_env_config
    from codebrev.indexer.processor import OutlineIndexer
    from codebrev.report.writer import OutlineWriter

    config = get_env_config()
    root = sys.argv[1] if len(sys.argv) > 1 else config["workspace_path"]

    logger.info(f"Scan root: {root}")
    logger.info(f"Output: {config['output_path']}")
    logger.info(f"Script parser: {config['script_parser']}")

    try:
        outline = OutlineIndexer.from_config(config).index(root)
    except OSError as e:
        logger.error(f"Cannot index {root}: {e}")
        return 1

    try:
        writer = OutlineWriter(outline, include_diagrams=config["include_diagrams"])
        writer.write(config["output_path"])
    except OSError as e:
        logger.error(f"Cannot write report: {e}")
        return 1

    logger.info(
        f"Done: {len(outline.files)} files, {len(outline.packages)} packages, "
        f"{len(outline.types)} types"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
