from __future__ import annotations

import logging

from wl_sync.core import LoggerFactory
from wl_sync.core.exceptions import ContentStoreError, EntityUriCollisionError, ErrorCode, ExternalServiceError


def test_create_default_logger_is_namespaced() -> None:
    logger = LoggerFactory.create_default_logger("wl_sync.tests")

    assert logger.name == "wl_sync.tests"
    assert logging.getLogger("wl_sync").handlers


def test_configure_adjusts_level() -> None:
    LoggerFactory.configure("DEBUG")
    try:
        assert logging.getLogger("wl_sync").level == logging.DEBUG
    finally:
        LoggerFactory.configure("INFO")


def test_error_codes_and_details() -> None:
    exc = ExternalServiceError(ErrorCode.TRIPLESTORE_TIMEOUT, "超时", details={"endpoint": "e"})
    assert str(exc) == "[TRIPLESTORE_TIMEOUT] 超时"
    assert exc.details == {"endpoint": "e"}

    store_error = ContentStoreError("boom")
    assert store_error.code == ErrorCode.CONTENT_STORE_ERROR
    assert store_error.details == {}

    collision = EntityUriCollisionError("local", "source", 7)
    assert collision.owner_id == 7
    assert collision.details == {"localUri": "local", "sourceUri": "source", "ownerId": 7}


def test_error_codes_are_the_raised_ones() -> None:
    assert {code.value for code in ErrorCode} == {
        "TRIPLESTORE_CONNECT_ERROR",
        "TRIPLESTORE_TIMEOUT",
        "TRIPLESTORE_UPDATE_ERROR",
        "CONTENT_STORE_ERROR",
        "ENTITY_URI_MISSING",
        "ENTITY_URI_COLLISION",
    }
