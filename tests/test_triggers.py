"""
Popup trigger rules.
"""

from popupmail.modules.storefront.triggers import (
    MS_PER_DAY, evaluate, is_suppressed, matches_page, matches_url_param
)

NOW = 1_700_000_000_000


def _config(**overrides):
    config = {
        "triggerDelay": 3,
        "triggerPages": "all",
        "triggerUrlParam": "memberspace=summer",
        "redisplayAfterDays": 7,
    }
    config.update(overrides)
    return config


def test_url_param_key_and_value():
    assert matches_url_param("memberspace=summer", "?memberspace=summer")
    assert matches_url_param("memberspace=summer", "utm=x&memberspace=summer")
    assert not matches_url_param("memberspace=summer", "?memberspace=winter")
    assert not matches_url_param("memberspace=summer", "?other=summer")


def test_url_param_key_only_matches_presence():
    assert matches_url_param("popup", "?popup")
    assert matches_url_param("popup", "?popup=")
    assert matches_url_param("popup", "?popup=anything")
    assert not matches_url_param("popup", "?nopopup=1")


def test_url_param_empty_never_matches():
    assert not matches_url_param("", "?popup")
    assert not matches_url_param(None, "?popup")


def test_page_rules():
    assert matches_page("homepage", "/")
    assert matches_page("homepage", "")
    assert not matches_page("homepage", "/products/tee")
    assert matches_page("products", "/products/tee")
    assert not matches_page("products", "/collections/all")
    assert matches_page("collections", "/collections/summer")
    assert matches_page("all", "/pages/about")
    assert matches_page("unknown", "/anything")


def test_suppression():
    assert not is_suppressed(None)
    assert is_suppressed({"completed": True, "completedAt": NOW})
    assert is_suppressed({"dismissed": True, "dismissedAt": NOW - 2 * MS_PER_DAY}, 7, NOW)
    assert not is_suppressed({"dismissed": True, "dismissedAt": NOW - 8 * MS_PER_DAY}, 7, NOW)
    # Default window is seven days
    assert is_suppressed({"dismissed": True, "dismissedAt": NOW - 6 * MS_PER_DAY}, None, NOW)
    assert not is_suppressed({"dismissed": True}, 7, NOW)


def test_forced_by_url_param_skips_other_rules():
    decision = evaluate(
        _config(triggerPages="homepage"),
        "/products/tee",
        "?memberspace=summer",
        stored={"completed": True},
        now_ms=NOW,
    )

    assert decision.show is True
    assert decision.forced is True
    assert decision.delay_ms == 0


def test_suppressed_visitor():
    decision = evaluate(_config(), "/", "", stored={"completed": True}, now_ms=NOW)
    assert decision.show is False
    assert decision.reason == "suppressed"


def test_wrong_page():
    decision = evaluate(_config(triggerPages="collections"), "/products/tee", "")
    assert decision.show is False
    assert decision.reason == "page"


def test_delay_in_milliseconds():
    assert evaluate(_config(triggerDelay=5), "/", "").delay_ms == 5000
    assert evaluate(_config(triggerDelay=0), "/", "").delay_ms == 0
    assert evaluate(_config(triggerDelay=None), "/", "").delay_ms == 2000
    assert evaluate(_config(triggerDelay=-1), "/", "").delay_ms == 2000
