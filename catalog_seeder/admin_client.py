"""
Admin API Client — Preview and publish content paths through the AEM Admin API.

URL shape:
    https://admin.hlx.page/{api}/{org}/{site}/{ref}{path}?hlx-admin-version=...

  - The /{org}/{site}/{ref} segment is only added when all three are set.
  - hlx-admin-version is appended before any other query parameter.

Operations used by the seeder:
    POST /preview/{org}/{site}/{ref}{path}    Preview a single path
    POST /live/{org}/{site}/{ref}{path}       Publish a single path
    POST /{api}/{org}/{site}/{ref}/*          Start a bulk job ({forceUpdate, paths})
    GET  /job/{org}/{site}/{ref}/{kind}/{name}/details   Poll a bulk job

Bulk jobs started on "live" are reported under the "publish" job kind, so
polling uses a different name than the trigger endpoint.

Authentication:
    authorization: token {HELIX_ADMIN_API_KEY}
"""

import threading
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from .errors import BulkJobError, JobTimeoutError, NetworkError, ParseError
from .models import BulkJob, SiteConfig, StoreContext
from .path_resolver import compute_paths

ADMIN_ORIGIN = "https://admin.hlx.page"

# Trigger API name -> job kind used by the job details endpoint
JOB_KINDS = {"preview": "preview", "live": "publish"}


def create_admin_url(
    config: SiteConfig,
    api: str,
    path: str = "",
    params: Optional[Dict[str, str]] = None,
) -> str:
    """Create an Admin API URL for an API and resource path.

    Args:
        config: Site config providing org, site, ref and admin_version.
        api: The API endpoint (e.g., "preview", "live", "job").
        path: The resource path, starting with "/".
        params: Extra query parameters.

    Returns:
        The full admin URL.
    """
    url = f"{ADMIN_ORIGIN}/{api}"
    if config.org and config.site and config.ref:
        url += f"/{config.org}/{config.site}/{config.ref}"
    url += path

    query = []
    if config.admin_version:
        query.append(("hlx-admin-version", config.admin_version))
    query.extend((params or {}).items())
    if query:
        url += f"?{urlencode(query)}"
    return url


class AdminClient:
    """Client for the Admin API preview, live and job endpoints.

    Attributes:
        config: The site config (org/site/ref and API key).
        timeout: Per-request timeout in seconds.
        poll_interval: Seconds to wait between job polls.
        poll_backoff: Multiplier applied to the interval after each poll.
        poll_max_interval: Upper bound for the poll interval.
        poll_timeout: Give up on a job after this many seconds (None/0 = never).
        debug: If True, print verbose request details.
    """

    def __init__(
        self,
        config: SiteConfig,
        timeout: float = 30,
        poll_interval: float = 1.0,
        poll_backoff: float = 1.0,
        poll_max_interval: float = 30.0,
        poll_timeout: Optional[float] = None,
        debug: bool = False,
    ):
        self.config = config
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.poll_backoff = poll_backoff
        self.poll_max_interval = poll_max_interval
        self.poll_timeout = poll_timeout
        self.debug = debug
        self._local = threading.local()

    @property
    def _session(self) -> requests.Session:
        """The calling thread's HTTP session.

        preview_publish runs on worker threads, so each thread keeps its own
        requests.Session.
        """
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    @_session.setter
    def _session(self, session: requests.Session) -> None:
        self._local.session = session

    def call(
        self,
        api: str,
        path: str = "",
        method: str = "GET",
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """Call the Admin API and return the raw response.

        A JSON body sets Content-Type: application/json unless the caller
        passes its own Content-Type header.

        Raises:
            NetworkError: If the request could not be sent.
        """
        url = create_admin_url(self.config, api, path, params)

        request_headers = {}
        if self.config.helix_api_key:
            request_headers["authorization"] = f"token {self.config.helix_api_key}"
        if body is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        if self.debug:
            print(f"  {method.upper()} {url}")

        try:
            return self._session.request(
                method.upper(),
                url,
                headers=request_headers,
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method.upper()} {url} failed: {e}") from e

    def create_bulk_job(self, api: str, paths: List[str]) -> BulkJob:
        """Start a bulk preview/publish job and wait for it to finish.

        Args:
            api: "preview" or "live".
            paths: The content paths to include in the job.

        Returns:
            The stopped BulkJob with its per-path resources.

        Raises:
            BulkJobError: If the job could not be created, parsed or polled.
        """
        body = {"forceUpdate": True, "paths": paths}
        try:
            response = self.call(api, "/*", method="POST", body=body)
            if not response.ok:
                raise NetworkError(
                    f"{response.status_code} {response.headers.get('x-error', response.reason)}",
                    status=response.status_code,
                )
            job = BulkJob.from_dict(response.json())
        except (NetworkError, ParseError, ValueError) as e:
            raise BulkJobError(f"failed to create {api} job: {e}") from e

        print(f"  Created {api} job {job.name} for {len(paths)} path(s)")
        return self.poll_job(JOB_KINDS.get(api, api), job.name)

    def poll_job(self, job_kind: str, job_name: str) -> BulkJob:
        """Poll a bulk job until its state is "stopped".

        Raises:
            JobTimeoutError: If poll_timeout elapses first.
            BulkJobError: If a poll request fails or returns a malformed body.
        """
        path = f"/{job_kind}/{job_name}/details"
        interval = self.poll_interval
        started = time.monotonic()

        while True:
            try:
                response = self.call("job", path)
                if not response.ok:
                    raise NetworkError(
                        f"{response.status_code} {response.reason}", status=response.status_code
                    )
                job = BulkJob.from_dict(response.json())
            except (NetworkError, ParseError, ValueError) as e:
                raise BulkJobError(f"failed to poll {job_kind} job {job_name}: {e}") from e

            if self.debug:
                print(f"  Job {job_kind}/{job_name}: {job.state}")

            if job.stopped:
                return job

            if self.poll_timeout and time.monotonic() - started >= self.poll_timeout:
                raise JobTimeoutError(job_kind, job_name, self.poll_timeout, job.state)

            time.sleep(interval)
            interval = min(interval * self.poll_backoff, self.poll_max_interval)

    def preview_publish(
        self,
        store_context: StoreContext,
        sku: str,
        url_key: Optional[str],
        should_publish: bool = True,
        method: str = "POST",
    ) -> Dict[str, Any]:
        """Preview (and optionally publish) every path of one product.

        Publishing is attempted even when preview fails for a path; each
        operation's status is recorded on its own.

        Returns:
            {"sku": ..., "paths": {path: {"preview": {status, url, message?},
                                          "live": {...}}}}
        """
        result = {"sku": sku, "paths": {}}

        for path in compute_paths(self.config, store_context, sku, url_key):
            ops = ["preview", "live"] if should_publish else ["preview"]
            result["paths"][path] = {op: self._call_op(op, path, method) for op in ops}

        return result

    def _call_op(self, op: str, path: str, method: str) -> Dict[str, Any]:
        response = self.call(op, path, method=method)
        try:
            body = response.json()
        except ValueError:
            body = {}

        op_body = body.get(op) if isinstance(body, dict) else None
        outcome = {
            "status": response.status_code,
            "url": op_body.get("url") if isinstance(op_body, dict) else None,
        }
        message = response.headers.get("x-error")
        if message:
            outcome["message"] = message
        return outcome
