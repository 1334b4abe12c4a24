"""HTTP client for the TaskFlow API with a local task cache.

The cache is only changed after the server confirms a request; a failed
request raises and leaves the cache as it was.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import AuthError, DependencyError, NotFoundError, TaskflowError, ValidationError
from .schemas.task import TaskRead
from .services.tasks import filter_tasks

logger = logging.getLogger(__name__)

_ERRORS_BY_KIND = {
    cls.kind: cls for cls in (ValidationError, AuthError, NotFoundError, DependencyError)
}


class TaskflowClient:
    """Client for one signed-in user.

    Attributes:
        http: Underlying httpx client; any ``httpx.Client`` works, including
            FastAPI's ``TestClient``
        token: Bearer token, set by ``signup``/``login``
        tasks: Cached task list, newest first
    """

    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None,
                 timeout: float = 30.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None
        self.tasks: List[TaskRead] = []

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "TaskflowClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Transport ---

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise DependencyError("TaskFlow API unreachable") from e

        if response.is_error:
            raise self._error_from(response)
        return response

    @staticmethod
    def _error_from(response: httpx.Response) -> TaskflowError:
        try:
            error = response.json().get("error", {})
        except ValueError:
            error = {}
        message = error.get("message") or response.reason_phrase
        error_cls = _ERRORS_BY_KIND.get(error.get("kind"))
        if error_cls is None:
            error_cls = DependencyError if response.status_code >= 500 else ValidationError
        return error_cls(message)

    # --- Auth ---

    def _authenticate(self, path: str, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", path, json={"email": email, "password": password}).json()
        self.token = body["token"]
        self.user = body["user"]
        self.tasks = []
        return self.user

    def signup(self, email: str, password: str) -> Dict[str, Any]:
        return self._authenticate("/auth/signup", email, password)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._authenticate("/auth/login", email, password)

    def logout(self) -> None:
        self.token = None
        self.user = None
        self.tasks = []

    # --- Tasks ---

    def refresh(self) -> List[TaskRead]:
        """Reload the cache from the server."""
        data = self._request("GET", "/tasks").json()
        self.tasks = [TaskRead.model_validate(t) for t in data]
        return self.tasks

    def create_task(self, payload: Dict[str, Any]) -> TaskRead:
        task = TaskRead.model_validate(self._request("POST", "/tasks", json=payload).json())
        self.tasks.insert(0, task)
        return task

    def update_task(self, task_id: str, payload: Dict[str, Any]) -> TaskRead:
        task = TaskRead.model_validate(
            self._request("PUT", f"/tasks/{task_id}", json=payload).json()
        )
        self.tasks = [task if t.id == task_id else t for t in self.tasks]
        return task

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/tasks/{task_id}")
        self.tasks = [t for t in self.tasks if t.id != task_id]

    def get_insights(self, tasks: Optional[List[TaskRead]] = None) -> Dict[str, Any]:
        """Ask the server for a productivity summary of ``tasks`` (default: the cache)."""
        tasks = self.tasks if tasks is None else tasks
        payload = {"tasks": [t.model_dump(mode="json", by_alias=True) for t in tasks]}
        return self._request("POST", "/tasks/insights", json=payload).json()

    # --- Derived views ---

    def filtered(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[TaskRead]:
        """Filter the cached tasks without a round trip."""
        return filter_tasks(self.tasks, status=status, priority=priority, tag=tag, search=search)

    def all_tags(self) -> List[str]:
        """Distinct tags across cached tasks, in first-seen order."""
        seen: Dict[str, None] = {}
        for task in self.tasks:
            for tag in task.tags:
                seen.setdefault(tag, None)
        return list(seen)
