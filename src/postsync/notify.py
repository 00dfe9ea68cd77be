"""Tell the serving site that articles changed.

After a successful update, POST ``secret=<secret>`` (form-encoded) to the
configured URL. Anything other than HTTP 200 is an error.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import TYPE_CHECKING

from postsync.errors import NotifyError

if TYPE_CHECKING:
    from postsync.config import NotifyConfig

logger = logging.getLogger("postsync.notify")


def notify_update(cfg: NotifyConfig) -> bool:
    """Send the update request. Returns False if no URL is configured."""
    if not cfg.enabled:
        logger.warning("notify.url not set: skipping update notification")
        return False

    data = urllib.parse.urlencode({"secret": cfg.secret}).encode()
    req = urllib.request.Request(cfg.url, data=data, method="POST")
    req.add_header("Content-Type", "application/x-www-form-urlencoded")
    try:
        with urllib.request.urlopen(req, timeout=cfg.timeout) as resp:  # noqa: S310
            status = resp.status
            reason = resp.reason
    except urllib.error.HTTPError as exc:
        msg = f"server update unexpectedly responded with {exc.code} {exc.reason}"
        raise NotifyError(msg) from exc
    except (urllib.error.URLError, OSError) as exc:
        msg = f"triggering server update failed: {exc}"
        raise NotifyError(msg) from exc

    if status != 200:
        msg = f"server update unexpectedly responded with {status} {reason}"
        raise NotifyError(msg)

    logger.info("notified %s", cfg.url)
    return True
