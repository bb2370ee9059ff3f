# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

import os
import sys
from pathlib import Path

from loguru import logger

__all__ = ["logger"]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("CLINICAL_ACCESS_LOG_DIR", "logs")

logger.remove()

# human readable, for the console
logger.add(
    sys.stderr,
    level=LOG_LEVEL,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    ),
)

log_path = Path(LOG_DIR)
if not log_path.exists():
    log_path.mkdir(parents=True, exist_ok=True)

# authorization decisions, one JSON record per line
logger.add(
    os.path.join(LOG_DIR, "clinical_access.log"),
    rotation="100 MB",
    retention="30 days",
    serialize=True,
    enqueue=True,
    level=LOG_LEVEL,
)
