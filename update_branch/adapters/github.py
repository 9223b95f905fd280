"""GitHub API adapter (REST v3 for issues and branch updates, GraphQL for pull
requests)."""

from typing import Any, Dict, List

import requests

from update_branch.adapters.base import GitPlatformAdapter, GitPlatformError
from update_branch.models import UNKNOWN, IssueInfo, PullRequestInfo

# Check run conclusions that count as a passed status check
PASSED_CHECK_CONCLUSIONS = frozenset({"SUCCESS", "NEUTRAL", "SKIPPED"})

_PULL_REQUEST_FIELDS = """
fragment PullRequestFields on PullRequest {
  id
  number
  title
  state
  isDraft
  mergeStateStatus
  latestOpinionatedReviews(first: 100, writersOnly: true) {
    nodes { state }
  }
  labels(first: 100) {
    nodes { name }
  }
  commits(last: 1) {
    nodes {
      commit {
        statusCheckRollup {
          contexts(first: 100) {
            nodes {
              __typename
              ... on CheckRun { name conclusion }
              ... on StatusContext { context state }
            }
          }
        }
      }
    }
  }
}
"""

VIEWER_QUERY = "query { viewer { login } }"

LIST_PULL_REQUESTS_QUERY = (
    """
query ($owner: String!, $name: String!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    pullRequests(first: 50, after: $cursor, states: OPEN, orderBy: {field: CREATED_AT, direction: ASC}) {
      nodes { ...PullRequestFields }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""
    + _PULL_REQUEST_FIELDS
)

GET_PULL_REQUEST_QUERY = (
    """
query ($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) { ...PullRequestFields }
  }
}
"""
    + _PULL_REQUEST_FIELDS
)

MERGE_PULL_REQUEST_MUTATION = """
mutation ($pullRequestId: ID!, $mergeMethod: PullRequestMergeMethod!) {
  mergePullRequest(input: {pullRequestId: $pullRequestId, mergeMethod: $mergeMethod}) {
    pullRequest { number }
  }
}
"""

ENABLE_AUTO_MERGE_MUTATION = """
mutation ($pullRequestId: ID!, $mergeMethod: PullRequestMergeMethod!) {
  enablePullRequestAutoMerge(input: {pullRequestId: $pullRequestId, mergeMethod: $mergeMethod}) {
    pullRequest { number }
  }
}
"""


def _split_repo(repo: str) -> tuple[str, str]:
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name:
        raise GitPlatformError(f"Invalid repository {repo!r}, expected owner/repo")
    return owner, name


def _passed_check_names(node: Dict[str, Any]) -> frozenset[str]:
    commits = (node.get("commits") or {}).get("nodes") or []
    if not commits:
        return frozenset()
    commit = (commits[-1] or {}).get("commit") or {}
    rollup = commit.get("statusCheckRollup") or {}
    contexts = (rollup.get("contexts") or {}).get("nodes") or []
    names = set()
    for ctx in contexts:
        if not isinstance(ctx, dict):
            continue
        if ctx.get("__typename") == "CheckRun":
            if ctx.get("conclusion") in PASSED_CHECK_CONCLUSIONS and ctx.get("name"):
                names.add(ctx["name"])
        elif ctx.get("__typename") == "StatusContext":
            if ctx.get("state") == "SUCCESS" and ctx.get("context"):
                names.add(ctx["context"])
    return frozenset(names)


def _pull_request_from_api(node: Dict[str, Any]) -> PullRequestInfo:
    reviews = (node.get("latestOpinionatedReviews") or {}).get("nodes") or []
    labels = (node.get("labels") or {}).get("nodes") or []
    return PullRequestInfo(
        id=node["id"],
        number=node["number"],
        title=node.get("title") or "",
        state=node.get("state") or "OPEN",
        merge_state_status=node.get("mergeStateStatus") or UNKNOWN,
        approval_count=sum(1 for r in reviews if r and r.get("state") == "APPROVED"),
        passed_status_check_names=_passed_check_names(node),
        label_names=frozenset(lb["name"] for lb in labels if isinstance(lb, dict) and lb.get("name")),
    )


def _issue_from_api(data: Dict[str, Any]) -> IssueInfo:
    user = data.get("user") or {}
    return IssueInfo(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        author=user.get("login", ""),
        state=data.get("state", "open"),
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        graphql_url: str | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._graphql_url = graphql_url or f"{self._api_url}/graphql"
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Accept"] = "application/vnd.github+json"
        self._session.headers["X-GitHub-Api-Version"] = "2022-11-28"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        resp = self._session.request(method, url, params=params, json=json, timeout=30)
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _graphql(self, query: str, variables: Dict[str, Any] | None = None) -> Dict[str, Any]:
        resp = self._session.request(
            "POST",
            self._graphql_url,
            json={"query": query, "variables": variables or {}},
            timeout=30,
        )
        if resp.status_code >= 400:
            raise GitPlatformError(f"{resp.status_code}: {resp.text or resp.reason}")
        payload = resp.json() or {}
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
            raise GitPlatformError(f"GraphQL error: {messages}")
        return payload.get("data") or {}

    def get_viewer_login(self) -> str:
        data = self._graphql(VIEWER_QUERY)
        login = (data.get("viewer") or {}).get("login")
        if not login:
            raise GitPlatformError("GraphQL error: viewer login missing from response")
        return login

    def list_available_pull_requests(self, repo: str) -> List[PullRequestInfo]:
        owner, name = _split_repo(repo)
        prs: List[PullRequestInfo] = []
        cursor: str | None = None
        while True:
            data = self._graphql(LIST_PULL_REQUESTS_QUERY, {"owner": owner, "name": name, "cursor": cursor})
            page = (data.get("repository") or {}).get("pullRequests") or {}
            for node in page.get("nodes") or []:
                if not node or node.get("isDraft"):
                    continue
                prs.append(_pull_request_from_api(node))
            info = page.get("pageInfo") or {}
            cursor = info.get("endCursor")
            if not info.get("hasNextPage") or not cursor:
                break
        return prs

    def get_pull_request(self, repo: str, number: int) -> PullRequestInfo:
        owner, name = _split_repo(repo)
        data = self._graphql(GET_PULL_REQUEST_QUERY, {"owner": owner, "name": name, "number": number})
        node = (data.get("repository") or {}).get("pullRequest")
        if not node:
            raise GitPlatformError(f"Not found: pull request #{number}")
        return _pull_request_from_api(node)

    def merge_pull_request(self, pr_id: str, merge_method: str) -> None:
        self._graphql(MERGE_PULL_REQUEST_MUTATION, {"pullRequestId": pr_id, "mergeMethod": merge_method})

    def update_branch(self, repo: str, number: int) -> None:
        self._request("PUT", f"/repos/{repo}/pulls/{number}/update-branch", json={})

    def enable_pull_request_auto_merge(self, pr_id: str, merge_method: str) -> None:
        self._graphql(ENABLE_AUTO_MERGE_MUTATION, {"pullRequestId": pr_id, "mergeMethod": merge_method})

    def find_created_issue_with_body_prefix(self, repo: str, author: str, prefix: str) -> IssueInfo | None:
        """Search open issues created by author, newest first.

        Pull requests share the issues endpoint and are skipped. Pages are
        fetched until a match is found or a short page ends the listing.
        """
        per_page = 100
        page = 1
        while True:
            resp = self._request(
                "GET",
                f"/repos/{repo}/issues",
                params={"creator": author, "state": "open", "per_page": per_page, "page": page},
            )
            items = resp.json() or []
            for data in items:
                if "pull_request" in data:
                    continue
                issue = _issue_from_api(data)
                if issue.body.lstrip().startswith(prefix):
                    return issue
            if len(items) < per_page:
                return None
            page += 1

    def create_issue(self, repo: str, title: str, body: str = "") -> IssueInfo:
        resp = self._request("POST", f"/repos/{repo}/issues", json={"title": title, "body": body})
        return _issue_from_api(resp.json())

    def update_issue(self, repo: str, issue_number: int, body: str) -> IssueInfo:
        resp = self._request("PATCH", f"/repos/{repo}/issues/{issue_number}", json={"body": body})
        return _issue_from_api(resp.json())
