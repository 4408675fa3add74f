# zigbang_ingest/entrypoints/cli.py
from __future__ import annotations

import asyncio
import logging
import sys

from ..config import ConfigError, Settings, require_api_key
from ..jobs.scrape import run_scrape

log = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def main() -> int:
    """
    No flags: the run is fully described by environment / .env.
    Exit 0 on completion, 1 on a configuration error or unrecovered failure.
    """
    cfg = Settings()
    _configure_logging(cfg.DEBUG)

    try:
        require_api_key(cfg)
        asyncio.run(run_scrape(cfg))
    except ConfigError as e:
        log.error("configuration error: %s", e)
        return 1
    except KeyboardInterrupt:
        log.warning("interrupted")
        return 1
    except Exception:
        log.exception("scraping failed")
        return 1

    log.info("Scraping completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
