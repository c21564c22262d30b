"""GitHub API client."""

import base64
import logging
import os
import subprocess
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from .models import GitHubContent, GitHubFile, GitHubRepository

logger = logging.getLogger(__name__)

# Retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_MIN_WAIT = 1  # seconds
DEFAULT_MAX_WAIT = 10  # seconds
REPOS_PER_PAGE = 100

# Retryable exceptions
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.NetworkError,
)


def is_retryable(exc: BaseException) -> bool:
    """Network failures and 5xx responses are retried, everything else is not."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


def get_token_from_gh_cli() -> str | None:
    """Ask an authenticated `gh` for its token; `None` when gh is missing or logged out."""
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0 and result.stdout.strip():
            logger.info("Listing with the gh CLI token")
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        logger.debug("No token from gh: %s", e)
    return None


def get_token(token: str | None = None, use_gh_cli: bool = False) -> str | None:
    """
    Resolve the token used for listing calls.

    An explicit token wins, then GH_TOKEN or GITHUB_TOKEN. The gh CLI is only
    consulted when ``use_gh_cli`` is set. Without a token, listings run
    against the anonymous rate limit.
    """
    if token:
        logger.debug("Listing with the token passed in")
        return token

    env_token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    if env_token:
        logger.info("Listing with the token from the environment")
        return env_token

    if use_gh_cli:
        return get_token_from_gh_cli()

    return None


def create_retry_decorator(
    max_retries: int = DEFAULT_MAX_RETRIES,
    min_wait: float = DEFAULT_MIN_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
):
    """Retry network failures and 5xx responses with exponential backoff."""
    return retry(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


class GitHubClient:
    """GitHub REST API client with retry support."""

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        use_gh_cli: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        min_wait: float = DEFAULT_MIN_WAIT,
        max_wait: float = DEFAULT_MAX_WAIT,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            token: Personal access token; resolved with `get_token` when omitted
            base_url: API root, e.g. a GitHub Enterprise `/api/v3` URL
            timeout: Per-request timeout in seconds
            use_gh_cli: Fall back to `gh auth token`
            max_retries: Attempts per request, the first one included
            min_wait: Lower backoff bound in seconds
            max_wait: Upper backoff bound in seconds
            transport: httpx transport, e.g. `httpx.MockTransport`
        """
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.max_retries = max_retries
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.transport = transport
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repotree-github-client",
        }

        resolved_token = get_token(token, use_gh_cli=use_gh_cli)

        if resolved_token:
            self.headers["Authorization"] = f"token {resolved_token}"
            logger.debug("Authenticated listing client")
        else:
            logger.warning("No GitHub token, listings share the anonymous rate limit")
        logger.info("Listing client for %s, max_retries=%d", self.base_url, max_retries)

    def _http_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            headers=self.headers,
            transport=self.transport,
        )

    def _retrying(self):
        return create_retry_decorator(self.max_retries, self.min_wait, self.max_wait)

    @staticmethod
    def _check(response: httpx.Response) -> None:
        if response.status_code >= 500:
            logger.warning("Server error %d, will retry", response.status_code)
            raise httpx.HTTPStatusError(
                f"Server error {response.status_code}",
                request=response.request,
                response=response,
            )
        response.raise_for_status()

    def _request(
        self, method: str, endpoint: str, **kwargs: Any
    ) -> httpx.Response:
        """Send one API request, retrying transient failures."""
        url = f"{self.base_url}{endpoint}"

        @self._retrying()
        def do_request() -> httpx.Response:
            logger.debug("Request: %s %s", method, url)
            with self._http_client() as client:
                response = client.request(method, url, **kwargs)
                logger.debug(
                    "Response: %s %s (status=%d)",
                    method,
                    endpoint,
                    response.status_code,
                )
                self._check(response)
                return response

        return do_request()

    def _download(self, url: str) -> str:
        """Fetch raw file text from a download URL."""
        @self._retrying()
        def do_download() -> str:
            logger.debug("Downloading: %s", url)
            with self._http_client() as client:
                response = client.get(url)
                self._check(response)
                return response.text

        return do_download()

    def get_contents(
        self, owner: str, repo: str, path: str = "", ref: str | None = None
    ) -> list[GitHubContent]:
        """List one directory of a repository, or describe a single file.

        ``path`` is relative to the repository root and ``ref`` defaults to the
        default branch. A file path yields a one-item list.
        """
        endpoint = f"/repos/{owner}/{repo}/contents/{path.strip('/')}"
        params = {"ref": ref} if ref else {}
        logger.info("Contents of %s/%s:%s at %s", owner, repo, path or "/", ref or "default branch")
        response = self._request("GET", endpoint, params=params)
        data = response.json()

        # a file path answers with an object instead of a list
        if isinstance(data, dict):
            logger.debug("%s is a file", data.get("path"))
            return [GitHubContent(**data)]

        logger.debug("%d items under %s", len(data), path or "/")
        return [GitHubContent(**item) for item in data]

    def get_file_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> GitHubFile:
        """
        Read one file as UTF-8 text.

        Raises:
            ValueError: ``path`` names a directory or a file without content
            httpx.HTTPStatusError: GitHub refused the request
        """
        contents = self.get_contents(owner, repo, path, ref)
        if len(contents) != 1 or contents[0].type != "file" or contents[0].path != path.strip("/"):
            logger.error("%s/%s:%s is not a file", owner, repo, path)
            raise ValueError(f"Path is not a file: {path}")

        content_item = contents[0]
        if content_item.download_url:
            decoded = self._download(content_item.download_url)
        elif content_item.content:
            logger.debug("Decoding inline content of %s", path)
            decoded = base64.b64decode(content_item.content).decode("utf-8")
        else:
            logger.error("%s has neither a download URL nor inline content", path)
            raise ValueError(f"File has no content: {path}")

        logger.debug("Read %s (%d chars)", path, len(decoded))

        return GitHubFile(
            name=content_item.name,
            path=content_item.path,
            sha=content_item.sha,
            size=content_item.size,
            html_url=content_item.html_url,
            content=decoded,
        )

    def list_repositories(self, owner: str) -> list[GitHubRepository]:
        """
        List all public repositories of a user, following pagination.

        Args:
            owner: User or organization login

        Returns:
            List of GitHubRepository items
        """
        logger.info("Listing repositories of %s", owner)
        repositories: list[GitHubRepository] = []
        page = 1
        while True:
            response = self._request(
                "GET",
                f"/users/{owner}/repos",
                params={"per_page": REPOS_PER_PAGE, "page": page},
            )
            data = response.json()
            repositories.extend(GitHubRepository(**item) for item in data)
            if len(data) < REPOS_PER_PAGE:
                break
            page += 1
        logger.debug("Listed %d repositories of %s", len(repositories), owner)
        return repositories
