"""jobsh - a small line-oriented shell with background job tracking."""

from loguru import logger

__version__ = "0.1.0"

# Library code stays quiet until main() opts in.
logger.disable("jobsh")
