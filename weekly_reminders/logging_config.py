import logging

from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """Route all package logging through Rich"""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Provider SDKs are chatty at INFO
    for noisy in ("httpx", "httpcore", "urllib3", "anthropic", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
