#!/usr/bin/env python3
"""Main entry point for the weather alert ticker."""

import argparse
import logging
import sys
import threading
import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from .classify import classify_records
from .config import Settings, load_settings
from .display import ConsoleRenderer
from .fanout import fetch_all
from .fetchers.battleboard import build_paths
from .models import Alert
from .ranking import rank_alerts
from .rotation import RotationController


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def run_once(settings: Settings, session=None, fetch=None) -> List[Alert]:
    """Run one poll cycle: fetch, parse, classify and rank."""
    logger = logging.getLogger(__name__)
    start_time = datetime.utcnow()

    locators = build_paths(settings.regions, settings.lang)
    logger.info(f"Starting poll cycle for {len(locators)} regions")

    fetch_kwargs = {}
    if fetch is not None:
        fetch_kwargs["fetch"] = fetch
    else:
        fetch_kwargs.update(
            session=session,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )

    result = fetch_all(
        locators,
        settings.api_host,
        max_workers=settings.max_workers,
        **fetch_kwargs,
    )
    alerts = classify_records(result.records, keep_placeholders=settings.show_no_alerts_msg)
    ranked = rank_alerts(alerts)

    duration = (datetime.utcnow() - start_time).total_seconds()
    logger.info(
        f"Cycle complete in {duration:.2f}s: {len(result.records)} entries, "
        f"{len(ranked)} alerts, {len(result.failures)} failed feeds"
    )
    return ranked


class Poller:
    """
    Runs poll cycles and hands each result to a listener.

    Cycles may overlap when run in the background. A cycle's result is
    dropped if a newer cycle has already delivered its own.
    """

    def __init__(self, settings: Settings, on_update: Callable[[List[Alert]], None], session=None, fetch=None):
        self.settings = settings
        self.on_update = on_update
        self.session = session
        self.fetch = fetch
        self._lock = threading.Lock()
        self._cycle = 0
        self._accepted = 0
        self.logger = logging.getLogger(__name__)

    def update_config(self, settings: Settings):
        """Use new settings for every cycle started from now on."""
        with self._lock:
            self.settings = settings
        self.logger.info(f"Configuration updated: {len(settings.regions)} regions")

    def refresh(self) -> bool:
        """Run one cycle. Returns False if its result was discarded as stale."""
        with self._lock:
            self._cycle += 1
            cycle = self._cycle
            settings = self.settings

        alerts = run_once(settings, session=self.session, fetch=self.fetch)
        return self._deliver(cycle, alerts)

    def refresh_async(self) -> threading.Thread:
        """Run one cycle on a background thread."""
        thread = threading.Thread(target=self._refresh_logged, name="poll-cycle", daemon=True)
        thread.start()
        return thread

    def _refresh_logged(self):
        try:
            self.refresh()
        except Exception as e:
            self.logger.exception(f"Error during poll cycle: {e}")

    def _deliver(self, cycle: int, alerts: List[Alert]) -> bool:
        with self._lock:
            if cycle < self._accepted:
                self.logger.info(f"Discarding stale result of cycle {cycle}")
                return False
            self._accepted = cycle
            self.on_update(alerts)
        return True


def reload_settings(config_path: str, current: Settings) -> Settings:
    """Re-read the config file, keeping the current settings if it is unusable."""
    logger = logging.getLogger(__name__)
    try:
        return load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Error reloading config, keeping previous settings: {e}")
        return current


def run_forever(config_path: str, settings: Settings):
    """Poll on schedule and rotate through alerts until interrupted."""
    logger = logging.getLogger(__name__)
    renderer = ConsoleRenderer(lang=settings.lang)
    controller = RotationController(
        display_interval=settings.display_interval,
        animation_speed=settings.animation_speed,
        on_display=renderer.show,
        on_clear=renderer.clear,
    )
    poller = Poller(settings, on_update=controller.update)

    next_update = time.monotonic()
    next_sync = next_update + settings.sync_interval / 1000.0

    try:
        while True:
            now = time.monotonic()

            if settings.periodic_sync and now >= next_sync:
                logger.info("Syncing configuration")
                reloaded = reload_settings(config_path, settings)
                if reloaded is not settings:
                    settings = reloaded
                    poller.update_config(settings)
                    controller.display_interval = settings.display_interval
                    controller.animation_speed = settings.animation_speed
                    renderer.lang = settings.lang
                next_sync = now + settings.sync_interval / 1000.0
                next_update = now

            if now >= next_update:
                poller.refresh_async()
                next_update = now + settings.update_interval / 1000.0

            wake = next_update
            if settings.periodic_sync:
                wake = min(wake, next_sync)
            time.sleep(max(0.05, wake - time.monotonic()))
    finally:
        controller.stop()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Canadian public weather alert ticker"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run one cycle, print the ranked alerts and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--show-no-alerts",
        action="store_true",
        help="Keep \"No alerts in effect\" entries",
    )
    parser.add_argument(
        "--log-file",
        help="Path to log file",
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    # Load config
    try:
        settings = load_settings(args.config)
    except FileNotFoundError as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Error loading config: {e}")
        sys.exit(1)

    if args.show_no_alerts:
        settings = replace(settings, show_no_alerts_msg=True)

    # Run
    try:
        if args.once:
            renderer = ConsoleRenderer(lang=settings.lang)
            for alert in run_once(settings):
                renderer.show(alert)
        else:
            run_forever(args.config, settings)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logging.exception(f"Error during execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
