# studydash/infra/canvas/client.py
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from studydash.domain.canvas.models import (
    CanvasAssignment,
    CanvasCourse,
    CanvasModule,
    CanvasPlannerItem,
    CanvasQuiz,
)
from studydash.domain.sync.ports import CanvasGateway
from studydash.infra.canvas.errors import CanvasAPIError

logger = logging.getLogger(__name__)

Params = Sequence[tuple[str, Any]]

# Terms Canvas attaches to non-academic "courses"
EXCLUDED_TERMS = {"Communities"}


class CanvasClient(CanvasGateway):
    """
    Thin async wrapper over the Canvas REST API for one user's token.

    - one httpx.AsyncClient per instance; close with aclose() or `async with`
    - every request carries `Authorization: Bearer <token>`
    - list endpoints follow the `Link: rel="next"` header
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport helpers

    async def _get(self, url: str, params: Optional[Params] = None) -> httpx.Response:
        try:
            resp = await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            raise CanvasAPIError(None, f"{type(e).__name__} on GET {url}") from e
        if not resp.is_success:
            raise CanvasAPIError(resp.status_code, resp.reason_phrase or "")
        return resp

    async def _get_json(self, url: str, params: Optional[Params] = None) -> Any:
        resp = await self._get(url, params)
        try:
            return resp.json()
        except ValueError as e:
            raise CanvasAPIError(resp.status_code, f"invalid JSON from {url}") from e

    async def _get_paginated(self, url: str, params: Optional[Params] = None) -> list[Any]:
        results: list[Any] = []
        next_url: Optional[str] = url
        next_params = params
        while next_url:
            resp = await self._get(next_url, next_params)
            try:
                data = resp.json()
            except ValueError as e:
                raise CanvasAPIError(resp.status_code, f"invalid JSON from {next_url}") from e
            if isinstance(data, list):
                results.extend(data)
            else:
                results.append(data)
            # the next link already carries the query string
            next_url = resp.links.get("next", {}).get("url")
            next_params = None
        return results

    # ------------------------------------------------------------------
    # Resources

    async def fetch_courses(self) -> list[CanvasCourse]:
        data = await self._get_json("/dashboard/dashboard_cards", [("enrollmentState", "active")])
        if not isinstance(data, list):
            raise CanvasAPIError(None, "dashboard cards response is not a list")

        courses: list[CanvasCourse] = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            term = raw.get("term")
            if term is None or term in EXCLUDED_TERMS:
                continue
            courses.append(CanvasCourse.from_json(raw))
        logger.info("Fetched %d Canvas courses", len(courses))
        return courses

    async def fetch_assignments(self, course_id: int) -> list[CanvasAssignment]:
        params = [
            ("include[]", "submission"),
            ("include[]", "overrides"),
            ("include[]", "all_dates"),
            ("per_page", 200),
        ]
        try:
            raw_items = await self._get_paginated(f"/courses/{course_id}/assignments", params)
        except CanvasAPIError as e:
            logger.warning("Failed to fetch assignments for course %s: %s", course_id, e)
            return []

        # one course can list the same assignment more than once
        unique: dict[int, CanvasAssignment] = {}
        for raw in raw_items:
            try:
                assignment = CanvasAssignment.from_json(raw)
            except ValueError as e:
                logger.warning("Ignoring malformed assignment in course %s: %s", course_id, e)
                continue
            if assignment.is_published:
                unique[assignment.id] = assignment

        logger.info("Course %s: %d unique published assignments", course_id, len(unique))
        return list(unique.values())

    async def fetch_quizzes(self, course_id: int) -> list[CanvasQuiz]:
        try:
            raw_items = await self._get_paginated(f"/courses/{course_id}/quizzes", [("per_page", 200)])
        except CanvasAPIError as e:
            logger.error("Failed to fetch quizzes for course %s: %s", course_id, e)
            return []

        quizzes: list[CanvasQuiz] = []
        for raw in raw_items:
            try:
                quiz = CanvasQuiz.from_json(raw)
            except ValueError as e:
                logger.warning("Ignoring malformed quiz in course %s: %s", course_id, e)
                continue
            if quiz.published:
                quizzes.append(quiz)
        logger.info("Course %s: %d published quizzes", course_id, len(quizzes))
        return quizzes

    async def fetch_modules(self, course_id: int) -> list[CanvasModule]:
        params = [("include[]", "items"), ("include[]", "content_details")]
        raw_items = await self._get_paginated(f"/courses/{course_id}/modules", params)
        try:
            return [CanvasModule.from_json(raw) for raw in raw_items]
        except ValueError as e:
            raise CanvasAPIError(None, f"malformed module payload for course {course_id}: {e}") from e

    async def fetch_assignment(self, course_id: int, assignment_id: int) -> Optional[CanvasAssignment]:
        try:
            raw = await self._get_json(f"/courses/{course_id}/assignments/{assignment_id}")
            return CanvasAssignment.from_json(raw)
        except (CanvasAPIError, ValueError) as e:
            logger.warning("Failed to fetch assignment %s: %s", assignment_id, e)
            return None

    async def fetch_planner_items(self, start_date: str, end_date: str) -> list[CanvasPlannerItem]:
        variants: list[list[tuple[str, Any]]] = [
            [("start_date", start_date), ("end_date", end_date)],
            [
                ("start_date", start_date),
                ("end_date", end_date),
                ("context_codes[]", "course"),
                ("filter", "new_activity"),
            ],
        ]

        last_error: Optional[CanvasAPIError] = None
        for params in variants:
            try:
                data = await self._get_json("/planner/items", params)
            except CanvasAPIError as e:
                logger.warning("Planner API variant %s failed: %s", params, e)
                last_error = e
                continue
            if not isinstance(data, list):
                logger.warning("Planner API variant %s returned a non-list payload", params)
                last_error = CanvasAPIError(None, "planner response is not a list")
                continue

            items: list[CanvasPlannerItem] = []
            for raw in data:
                if not isinstance(raw, dict) or raw.get("plannable_type") != "assignment":
                    continue
                try:
                    item = CanvasPlannerItem.from_json(raw)
                except ValueError as e:
                    logger.debug("Ignoring malformed planner item: %s", e)
                    continue
                if item.plannable.due_at:
                    items.append(item)
            logger.info("Fetched %d planner items, %d dated assignments", len(data), len(items))
            return items

        status = last_error.status if last_error else None
        raise CanvasAPIError(status, "All planner API endpoints failed")

    async def fetch_course(self, course_id: str) -> Optional[dict[str, Any]]:
        try:
            data = await self._get_json(f"/courses/{course_id}")
        except CanvasAPIError as e:
            logger.warning("Canvas course fetch failed for course %s: %s", course_id, e)
            return None
        return data if isinstance(data, dict) else None

    async def probe(self, url: str) -> bool:
        try:
            resp = await self._http.head(url)
        except httpx.HTTPError as e:
            logger.warning("HEAD request failed for %s: %s", url, e)
            return False
        return resp.is_success
