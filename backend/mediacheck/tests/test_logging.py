from __future__ import annotations

import json
import logging

from mediacheck.core.logging import JsonFormatter


def test_json_formatter_includes_context_fields() -> None:
    record = logging.LogRecord("mediacheck.services.ai_reply", logging.INFO, __file__, 10, "Creating AI reply %s", ("r-1",), None)
    record.article_id = "reported-article"
    record.user_id = "test"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Creating AI reply r-1"
    assert payload["level"] == "INFO"
    assert payload["article_id"] == "reported-article"
    assert payload["user_id"] == "test"
    assert "request_id" not in payload
