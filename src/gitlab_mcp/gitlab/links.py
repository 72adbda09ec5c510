"""Web UI deep links.

Presentation helpers only: nothing here calls the API. Links are joined
onto the instance URL (which may itself carry a path prefix, e.g.
https://example.com/gitlab). Namespace paths keep their "/" separators;
every other component is percent-encoded.
"""

from urllib.parse import quote, urlencode

__all__ = ["WebLinks"]

DEFAULT_TAG_REF = "master"


class WebLinks:
    """Builds GitLab web URLs for one instance.

    Example:
        >>> links = WebLinks("https://gitlab.example.com")
        >>> links.merge_request("team/app", 12)
        'https://gitlab.example.com/team/app/-/merge_requests/12'
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def _join(self, project_path: str, *suffix: str) -> str:
        parts = [quote(project_path.strip("/"), safe="/")]
        parts.extend(quote(str(s), safe="") for s in suffix)
        return f"{self.base_url}/" + "/".join(parts)

    def project(self, project_path: str) -> str:
        return self._join(project_path)

    def merge_request(self, project_path: str, iid: int | str) -> str:
        return self._join(project_path, "-", "merge_requests", str(iid))

    def pipeline(self, project_path: str, pipeline_id: int | str) -> str:
        return self._join(project_path, "-", "pipelines", str(pipeline_id))

    def job(self, project_path: str, job_id: int | str) -> str:
        return self._join(project_path, "-", "jobs", str(job_id))

    def job_raw_log(self, project_path: str, job_id: int | str) -> str:
        return self._join(project_path, "-", "jobs", str(job_id), "raw")

    def tag(self, project_path: str, tag_name: str) -> str:
        return self._join(project_path, "-", "tags", tag_name)

    def new_tag(self, project_path: str, tag_name: str, ref: str = DEFAULT_TAG_REF) -> str:
        """Tag creation page with the name and ref pre-filled."""
        query = urlencode({"tag_name": tag_name, "ref": ref})
        return f"{self._join(project_path, '-', 'tags', 'new')}?{query}"

    def user(self, username: str) -> str:
        return f"{self.base_url}/{quote(username, safe='')}"
