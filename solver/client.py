"""
HTTP client for the solver API that keeps the client-side session state.

The server stores the problem tree; this client stores the path through it
(ProblemStack) and the chat transcript (ChatLog), and reconciles the two using
the ids in each response: a stuck response pushes, a verified completion pops.

Usage:
    with SolverClient("http://localhost:8000") as client:
        client.ingest(text="Evaluate $\\int x^2 e^x dx$")
        client.stuck(user_text="I tried substitution")
        client.complete(user_text="u = x^2, dv = e^x dx ...")
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from solver.exceptions import SolverClientError, StackError
from solver.models.problem_stack import ChatLog, ProblemStack

logger = logging.getLogger("solver.client")


class SolverClient:
    """Drives one tutoring session against the API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: Optional[httpx.Client] = None,
        timeout: float = 90.0,
    ):
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self.stack = ProblemStack()
        self.chat = ChatLog()

    # ─── Session setup ────────────────────────────────────────────────

    def ingest(self, image_url: Optional[str] = None, text: Optional[str] = None) -> Dict[str, Any]:
        """Submit a new problem and open it as the root of a fresh stack."""
        body = {}
        if image_url:
            body["imageUrl"] = image_url
        if text:
            body["text"] = text
        created = self._request("POST", "/ingest", json=body)
        self.open(created["problemId"])
        return created

    def open(self, problem_id: str) -> Dict[str, Any]:
        """
        Rebuild the stack for a node by walking its parent chain to the root.

        Returns:
            The public view of the opened node
        """
        view = self.get_problem(problem_id)
        path = [view]
        while path[-1].get("parentId"):
            path.append(self.get_problem(path[-1]["parentId"]))
        path.reverse()

        root = path[0]
        stack = ProblemStack.start(root["id"], root.get("title") or "Problem")
        for level, node in enumerate(path[1:], start=1):
            stack.push(node["id"], f"Subproblem {level}")
        self.stack = stack
        self.chat = ChatLog()
        return view

    def get_problem(self, problem_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/problem/{problem_id}")

    def recent_problems(self, limit: int = 5) -> List[Dict[str, Any]]:
        return self._request("GET", "/recent-problems", params={"limit": limit})["problems"]

    # ─── Tutoring actions ─────────────────────────────────────────────

    def stuck(self, user_work_images: Optional[List[str]] = None, user_text: str = "") -> Dict[str, Any]:
        """Ask for a subproblem on the current node and push it onto the stack."""
        current = self._current()
        self._log_student_work(user_text, "stuck", current.id)
        result = self._request("POST", "/stuck", json={
            "problemId": current.id,
            "userWorkImages": user_work_images or [],
            "userText": user_text,
        })

        self.stack.push(result["subproblemId"], f"Subproblem {self.stack.depth}")
        self.chat.append("tutor", result["tutorIntro"], kind="stuck", problem_id=current.id)
        self.chat.append("tutor", result["tutorSubproblemMessage"], kind="stuck", problem_id=result["subproblemId"])
        return result

    def check(self, user_work_images: Optional[List[str]] = None, user_text: str = "") -> Dict[str, Any]:
        """Advisory feedback on the current node. The stack does not move."""
        current = self._current()
        self._log_student_work(user_text, "check", current.id)
        result = self._request("POST", "/check", json={
            "problemId": current.id,
            "userWorkImages": user_work_images or [],
            "userText": user_text,
        })
        self.chat.append("tutor", result["feedback"], kind="check", problem_id=current.id)
        return result

    def complete(self, user_work_images: Optional[List[str]] = None, user_text: str = "") -> Dict[str, Any]:
        """Submit an attempt at the current subproblem; pop back to the parent when solved."""
        current = self._current()
        self._log_student_work(user_text, "complete", current.id)
        result = self._request("POST", "/complete", json={
            "subproblemId": current.id,
            "userWorkImages": user_work_images or [],
            "userText": user_text,
        })
        self.chat.append("tutor", result["tutorMessage"], kind="complete", problem_id=current.id)

        if result["solved"] and not self.stack.is_at_root:
            self.stack.pop()
        return result

    def reveal(self) -> Dict[str, Any]:
        """Show the hidden solution and answer of the current node."""
        current = self._current()
        result = self._request("GET", "/reveal", params={"problemId": current.id})
        message = result["solution"]
        if result.get("answer"):
            message += f"\n\n**Answer:** {result['answer']}"
        self.chat.append("tutor", message, kind="reveal", problem_id=current.id)
        return result

    def navigate_to(self, index: int) -> None:
        """Breadcrumb click: truncate the stack to the entry at `index`."""
        self.stack.truncate_to(index)

    # ─── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "SolverClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ─── Internals ────────────────────────────────────────────────────

    def _current(self):
        if self.stack.is_empty:
            raise StackError("No problem is open")
        return self.stack.current

    def _log_student_work(self, user_text: str, kind: str, problem_id: str) -> None:
        if user_text:
            self.chat.append("student", user_text, kind=kind, problem_id=problem_id)

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self.http.request(method, path, **kwargs)
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            logger.warning(f"{method} {path} failed with {response.status_code}: {detail}")
            raise SolverClientError(response.status_code, str(detail))
        return response.json()
