"""GitHub extraction via the REST API.

The resource kind is read from the content id shape:

- ``gist/<user>/<gist_id>``                -> gist
- ``owner/repo/(issues|pull|discussions)/N`` -> issue, pull request, discussion
- ``owner/repo``                            -> repository (+ README as markdown)

Works unauthenticated (60 req/hr); ``GITHUB_TOKEN`` raises the limit.
"""

import base64
import binascii
import logging

from brain_enricher.exceptions import FetchError
from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.fetch import SafeFetcher
from brain_enricher.models.content import ExtractedMetadata, FullTextType
from brain_enricher.models.provider import ProviderType

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"

# Issue/PR bodies are truncated to this many characters for ``description``
DESCRIPTION_LENGTH = 500

_THREAD_MARKERS = ("/issues/", "/pull/", "/discussions/")


class GitHubExtractor(ContentExtractor):
    provider = ProviderType.GITHUB
    display_name = "GitHub"

    def __init__(self, fetcher: SafeFetcher, token: str = "") -> None:
        super().__init__(fetcher)
        self.token = token

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        if content_id.startswith("gist/"):
            return await self._extract_gist(content_id.removeprefix("gist/"))
        if any(marker in content_id for marker in _THREAD_MARKERS):
            return await self._extract_thread(content_id)
        return await self._extract_repo(content_id)

    async def _get(self, path: str) -> dict:
        response, data = await self.fetcher.fetch_json(
            f"{GITHUB_API}{path}", headers=self.headers, skip_ssrf_check=True
        )
        if not response.is_success:
            raise self.error(f"GitHub API error: {response.status_code}")
        return data or {}

    async def _extract_repo(self, repo_path: str) -> ExtractedMetadata:
        repo = await self._get(f"/repos/{repo_path}")
        owner = repo.get("owner") or {}
        license_info = repo.get("license") or {}
        readme = await self._fetch_readme(repo_path)

        return self.metadata(
            title=repo.get("full_name"),
            description=repo.get("description"),
            author=owner.get("login"),
            author_url=owner.get("html_url"),
            published_date=repo.get("created_at"),
            tags=repo.get("topics") or [],
            language=repo.get("language"),
            full_text=readme,
            full_text_type=FullTextType.MARKDOWN if readme else None,
            provider_data={
                "resource_type": "repository",
                "stars": repo.get("stargazers_count"),
                "forks": repo.get("forks_count"),
                "open_issues": repo.get("open_issues_count"),
                "license": license_info.get("name"),
                "default_branch": repo.get("default_branch"),
                "archived": repo.get("archived"),
                "updated_at": repo.get("updated_at"),
            },
        )

    async def _fetch_readme(self, repo_path: str) -> str | None:
        """README as markdown, or None. Never fails the extraction."""
        try:
            response, data = await self.fetcher.fetch_json(
                f"{GITHUB_API}/repos/{repo_path}/readme",
                headers=self.headers,
                skip_ssrf_check=True,
            )
        except FetchError as exc:
            logger.info("README unavailable for %s: %s", repo_path, exc)
            return None

        if not response.is_success or not data:
            return None
        if data.get("encoding") != "base64" or not data.get("content"):
            return None
        try:
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            logger.info("README for %s is not valid base64", repo_path)
            return None

    async def _extract_thread(self, path: str) -> ExtractedMetadata:
        owner, repo, kind, number = path.split("/")[:4]
        # REST uses "pulls" where the web UI uses "pull"
        api_kind = "pulls" if kind == "pull" else kind
        item = await self._get(f"/repos/{owner}/{repo}/{api_kind}/{number}")

        user = item.get("user") or {}
        body = item.get("body") or ""

        provider_data = {
            "resource_type": "pull_request" if kind == "pull" else kind.removesuffix("s"),
            "state": item.get("state"),
            "comments": item.get("comments"),
        }
        if kind == "pull":
            provider_data.update(
                additions=item.get("additions"),
                deletions=item.get("deletions"),
                changed_files=item.get("changed_files"),
                merged=item.get("merged"),
            )

        return self.metadata(
            title=item.get("title"),
            description=body[:DESCRIPTION_LENGTH] or None,
            author=user.get("login"),
            author_url=user.get("html_url"),
            published_date=item.get("created_at"),
            tags=[label.get("name") for label in item.get("labels") or [] if label.get("name")],
            full_text=body,
            full_text_type=FullTextType.MARKDOWN,
            provider_data=provider_data,
        )

    async def _extract_gist(self, gist_path: str) -> ExtractedMetadata:
        gist_id = gist_path.split("/")[-1]
        gist = await self._get(f"/gists/{gist_id}")
        owner = gist.get("owner") or {}
        files = list((gist.get("files") or {}).values())

        # One fenced markdown block per untruncated file
        blocks = [
            f"### {f.get('filename')}\n```{(f.get('language') or '').lower()}\n{f['content']}\n```"
            for f in files
            if f.get("content") and not f.get("truncated")
        ]
        full_text = "\n\n".join(blocks) or None

        return self.metadata(
            title=gist.get("description") or f"Gist by {owner.get('login')}",
            description=gist.get("description") or None,
            author=owner.get("login"),
            author_url=owner.get("html_url"),
            published_date=gist.get("created_at"),
            full_text=full_text,
            full_text_type=FullTextType.MARKDOWN if full_text else None,
            provider_data={
                "resource_type": "gist",
                "public": gist.get("public"),
                "files": [
                    {"filename": f.get("filename"), "language": f.get("language"), "size": f.get("size")}
                    for f in files
                ],
            },
        )
