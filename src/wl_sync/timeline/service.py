"""时间线短代码的数据与渲染。

文章引用的实体中，同时带有起止日期元数据的视为事件，转换为前端时间线
组件需要的 JSON 结构。"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from html import escape
from typing import Any, Mapping, Optional

from ..cms.store import ENTITY_POST_TYPE, ContentStore, Post
from ..core.logging import LoggerFactory
from ..relation.index import RelationshipIndex

CAL_DATE_START_KEY = "wl_cal_date_start"
CAL_DATE_END_KEY = "wl_cal_date_end"

_SHORTCODE_DEFAULTS = {"width": "100%", "height": "600px", "main_color": "#ddd"}


class TimelineService:
    """时间线事件查询、JSON 转换与容器渲染。"""

    def __init__(
        self,
        store: ContentStore,
        *,
        index: Optional[RelationshipIndex] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._index = index or RelationshipIndex(store)
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    def get_events(self, post_id: int | None) -> list[Post]:
        """返回文章引用的、同时具备起止日期的实体；未指定文章时返回空列表。"""

        if post_id is None:
            return []
        entity_ids = self._index.related_entity_ids(post_id)
        self._logger.debug("时间线候选实体 [post id :: %s][entity ids :: %s]", post_id, entity_ids)
        return [
            post
            for post in self._store.get_posts(entity_ids, post_type=ENTITY_POST_TYPE)
            if self._store.get_post_meta(post.id, CAL_DATE_START_KEY)
            and self._store.get_post_meta(post.id, CAL_DATE_END_KEY)
        ]

    def to_json(self, posts: list[Post], now: datetime | date | None = None) -> str:
        """将事件转换为时间线 JSON。

        没有事件时返回 JSON 编码的空字符串 ``""``（而非 ``[]`` 或 ``{}``），
        前端组件依赖这一约定。``startAtSlide`` 指向第一个日期范围覆盖 ``now``
        的事件，找不到时为 0。日期无法解析的事件会被跳过并记录告警。"""

        if not posts:
            return json.dumps("")

        today = _as_date(now or datetime.now())
        start_at_slide: int | None = None
        dates: list[dict[str, Any]] = []
        for post in posts:
            start = _parse_date(self._store.get_post_meta(post.id, CAL_DATE_START_KEY))
            end = _parse_date(self._store.get_post_meta(post.id, CAL_DATE_END_KEY))
            if start is None or end is None:
                self._logger.warning("忽略日期格式错误的事件 [post id :: %s]", post.id)
                continue
            if start_at_slide is None and start <= today <= end:
                start_at_slide = len(dates)

            entry: dict[str, Any] = {
                "startDate": start.strftime("%Y,%m,%d"),
                "endDate": end.strftime("%Y,%m,%d"),
                "headline": f'<a href="{self._store.get_permalink(post.id)}">{post.title}</a>',
                "text": post.content,
            }
            thumbnail = self._store.get_thumbnail(post.id)
            if thumbnail is not None:
                entry["asset"] = {"media": thumbnail.url}
            dates.append(entry)

        if not dates:
            return json.dumps("")
        return json.dumps(
            {
                "timeline": {"type": "default", "date": dates},
                "startAtSlide": start_at_slide or 0,
            }
        )

    def handle_ajax(self, post_id: int | str | None) -> tuple[str, str]:
        """AJAX 端点：返回 ``(content_type, body)``；非数字的 ``post_id`` 按未指定处理。"""

        resolved: int | None = None
        if isinstance(post_id, int):
            resolved = post_id
        elif isinstance(post_id, str) and post_id.strip().isdigit():
            resolved = int(post_id)
        elif post_id not in (None, ""):
            self._logger.warning("忽略非法的文章 ID 参数 [post id :: %r]", post_id)
        return "application/json", self.to_json(self.get_events(resolved))

    def render_shortcode(self, post_id: int, atts: Mapping[str, str] | None = None) -> str:
        """渲染时间线容器；宽高来自短代码参数，颜色与深度固定。"""

        options = {**_SHORTCODE_DEFAULTS, **{k: v for k, v in (atts or {}).items() if k in _SHORTCODE_DEFAULTS}}
        main_color = escape("#aaa")
        post = escape(str(post_id))
        return (
            f'<div class="wl-timeline" id="wl-timeline-{post}" data-post-id="{post}" data-depth="2"\n'
            f'    data-main-color="{main_color}"\n'
            f'    style="width:{escape(options["width"])};\n'
            f'        height:{escape(options["height"])};\n'
            f"        background-color:{main_color};\n"
            "        margin-top:10px;\n"
            '        margin-bottom:10px">\n'
            "</div>"
        )


def _parse_date(value: object) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value
