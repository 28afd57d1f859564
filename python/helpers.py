import json
import logging
import os
import time

logger = logging.getLogger(__name__)


def merge_config(base, override):
    """Recursive merge of override into a copy of base."""
    merged = dict(base or {})
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = merge_config(merged[k], v)
        else:
            merged[k] = v
    return merged


def load_config(path="config.json"):
    if not os.path.exists(path):
        logger.info("config '%s' not found, using defaults.", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("failed to load config '%s': %s", path, e)
        return {}
    if not isinstance(cfg, dict):
        logger.warning("config '%s' is not a JSON object, ignoring it", path)
        return {}
    return cfg


class ConfigWatcher:
    """
    Hot reload for the tunables file read by the classifier thread.

    check_reload() stats the file at most once per min_check_interval seconds
    and re-parses it when its mtime moves. A missing, unreadable or malformed
    file is logged and the last good config stays in effect, so a half-saved
    edit never resets the thresholds to an empty dict.
    """

    def __init__(self, path="config.json", min_check_interval=0.5):
        self.path = path
        self._cfg = {}
        self._mtime = 0.0
        self._last_checked = 0.0
        self._min_check_interval = min_check_interval  # seconds between checks
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            self._cfg = {}
            self._mtime = 0.0
            return
        try:
            self._mtime = os.path.getmtime(self.path)
        except OSError as e:
            logger.warning("cannot stat config '%s': %s", self.path, e)
            return
        # a broken file keeps the last good config
        cfg = load_config(self.path)
        if cfg:
            self._cfg = cfg

    def get_config(self):
        return self._cfg

    def check_reload(self):
        """
        Call frequently. Only stats the file every _min_check_interval seconds.
        Returns current config (reloaded if changed).
        """
        now = time.time()
        if now - self._last_checked < self._min_check_interval:
            return self._cfg
        self._last_checked = now

        if not os.path.exists(self.path):
            # file missing -> keep existing config
            return self._cfg
        try:
            m = os.path.getmtime(self.path)
        except OSError as e:
            logger.warning("check_reload error: %s", e)
            return self._cfg
        if m != self._mtime:
            logger.info("detected %s change, reloading", self.path)
            self._load()
        return self._cfg
