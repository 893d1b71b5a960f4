import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# extra keys set by the formatter itself; everything else becomes a prefix
_INTERNAL_KEYS = {"rel_path", "formatted_prefix"}


def enrich_record(record):
    # Path relative to the working directory
    file_path = Path(record["file"].path)
    try:
        relative_path = file_path.relative_to(Path.cwd())
    except ValueError:
        relative_path = file_path
    record["extra"]["rel_path"] = str(relative_path)

    # logger.contextualize(node=...) values are shown as [value] prefixes
    prefix_keys = [k for k in record["extra"].keys() if k not in _INTERNAL_KEYS]
    if prefix_keys:
        prefix_parts = [f"[{record['extra'][k]}]" for k in prefix_keys]
        record["extra"]["formatted_prefix"] = " ".join(prefix_parts) + " "
    else:
        record["extra"]["formatted_prefix"] = ""

    return True


def configure_logger(verbose: bool = False, log_file: Optional[str] = None):
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{extra[rel_path]}</cyan>:<cyan>{line}</cyan> - <level>{extra[formatted_prefix]}{message}</level>",
        colorize=True,
        filter=enrich_record,
    )
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="10 MB", filter=enrich_record,
                   format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[rel_path]}:{line} - {extra[formatted_prefix]}{message}")
