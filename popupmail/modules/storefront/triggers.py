"""
Popup trigger rules.

The same rules run in the browser (popup.js); the config endpoint applies the
page and URL-parameter rules server side when the script sends its location.
"""

import time
from collections import namedtuple
from urllib.parse import parse_qs

DEFAULT_DELAY_SECONDS = 2
DEFAULT_REDISPLAY_DAYS = 7
MS_PER_DAY = 1000 * 60 * 60 * 24

PopupDecision = namedtuple('PopupDecision', ['show', 'forced', 'delay_ms', 'reason'])


def matches_url_param(trigger_url_param, search):
    """
    True when the page query string carries the campaign's trigger parameter.

    "key" matches whenever the parameter is present (even empty),
    "key=value" requires that exact value.
    """
    if not trigger_url_param:
        return False

    key, sep, value = trigger_url_param.partition('=')
    params = parse_qs((search or '').lstrip('?'), keep_blank_values=True)
    if key not in params:
        return False
    if sep and params[key][0] != value:
        return False
    return True


def matches_page(trigger_pages, path):
    path = path or ''
    if trigger_pages == 'homepage':
        return path in ('/', '')
    if trigger_pages == 'products':
        return '/products/' in path
    if trigger_pages == 'collections':
        return '/collections/' in path
    return True


def is_suppressed(stored, redisplay_after_days=None, now_ms=None):
    """
    Whether the visitor's stored popup state hides the popup.

    `stored` is the localStorage record: {completed, completedAt, dismissed, dismissedAt}
    with timestamps in epoch milliseconds.
    """
    if not stored:
        return False
    if stored.get('completed'):
        return True

    dismissed_at = stored.get('dismissedAt')
    if stored.get('dismissed') and dismissed_at:
        days = redisplay_after_days or DEFAULT_REDISPLAY_DAYS
        if now_ms is None:
            now_ms = time.time() * 1000
        days_since = (now_ms - dismissed_at) / MS_PER_DAY
        return days_since < days

    return False


def evaluate(config, path, search, stored=None, now_ms=None):
    """
    Decide whether and when to show the popup for a public campaign config.

    A matching URL parameter forces the popup: storage and page rules are
    skipped and it opens without delay.
    """
    if matches_url_param(config.get('triggerUrlParam'), search):
        return PopupDecision(True, True, 0, 'forced')

    if stored is not None and is_suppressed(stored, config.get('redisplayAfterDays'), now_ms):
        return PopupDecision(False, False, None, 'suppressed')

    if not matches_page(config.get('triggerPages'), path):
        return PopupDecision(False, False, None, 'page')

    delay = config.get('triggerDelay')
    if not isinstance(delay, int) or delay < 0:
        delay = DEFAULT_DELAY_SECONDS
    return PopupDecision(True, False, delay * 1000, 'ok')
