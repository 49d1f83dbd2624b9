from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

SYSTEM_PROMPT_TEMPLATE = (
    "今天是{today}。你是協助讀者進行媒體識讀的小幫手。你說話時總是使用台灣繁體中文。有讀者傳了一則網路訊息給你。"
)

READER_QUESTION = "請問作為閱聽人，我應該注意這則訊息的哪些地方呢？\n請節錄訊息中需要特別留意的地方，說明為何閱聽人需要注意它，謝謝。"


def format_reply_date(moment: datetime, tz: str) -> str:
    """Long zh-TW date, e.g. 2020年10月10日, as seen in ``tz``."""
    local = moment.astimezone(ZoneInfo(tz))
    return f"{local.year}年{local.month}月{local.day}日"


def build_completion_request(article_text: str, today: str, model: str) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT_TEMPLATE.format(today=today)},
            {"role": "user", "content": article_text},
            {"role": "user", "content": READER_QUESTION},
        ],
    }


def serialize_request(request: dict[str, Any]) -> str:
    return json.dumps(request, ensure_ascii=False, separators=(",", ":"))
