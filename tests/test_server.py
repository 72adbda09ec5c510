"""Tests for the FastMCP server wiring.

The server is exercised in-process through fastmcp's in-memory client, so
tool registration, argument schemas and the lifespan hooks all run for real.
"""

import json

import pytest
from fastmcp import Client

from gitlab_mcp.server import create_server

EXPECTED_TOOLS = {
    "service_info",
    "gitlab_projects",
    "gitlab_project_details",
    "gitlab_projects_search",
    "gitlab_project_tags",
    "gitlab_project_tag_create",
    "gitlab_merge_requests",
    "gitlab_merge_request_details",
    "gitlab_merge_requests_search",
    "gitlab_merge_request_changes",
    "gitlab_merge_request_diff",
    "gitlab_users",
    "gitlab_user_details",
    "gitlab_users_batch",
    "gitlab_current_user",
    "gitlab_project_members",
    "gitlab_group_members",
    "gitlab_pipelines",
    "gitlab_pipeline_details",
    "gitlab_latest_pipeline",
    "gitlab_pipeline_jobs",
    "gitlab_pipeline_variables",
    "gitlab_pipeline_test_report",
    "gitlab_project_jobs",
    "gitlab_job_details",
    "gitlab_job_trace",
    "gitlab_commits",
    "gitlab_commit_details",
    "gitlab_commit_diff",
    "gitlab_commit_statuses",
}


def _result_data(result) -> dict:
    return json.loads(result.content[0].text)


class TestCreateServer:
    @pytest.mark.asyncio
    async def test_registers_all_tools(self, gitlab_client):
        mcp = create_server(gitlab_client)

        tools = await mcp.get_tools()

        assert set(tools) == EXPECTED_TOOLS

    @pytest.mark.asyncio
    async def test_tools_have_descriptions(self, gitlab_client):
        tools = await create_server(gitlab_client).get_tools()

        for name, tool in tools.items():
            assert tool.description, name

    @pytest.mark.asyncio
    async def test_service_info_over_mcp(self, gitlab_client, recorder):
        mcp = create_server(gitlab_client)

        async with Client(mcp) as client:
            result = await client.call_tool("service_info", {})

        data = _result_data(result)
        assert data["success"] is True
        assert data["payload"]["read_only"] is True
        assert "glpat" not in result.content[0].text
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_tag_create_refused_over_mcp(self, gitlab_client, recorder):
        mcp = create_server(gitlab_client)

        async with Client(mcp) as client:
            result = await client.call_tool(
                "gitlab_project_tag_create", {"project": "team/app", "tag_name": "v1.0.0"}
            )

        data = _result_data(result)
        assert data["success"] is False
        assert data["error"]["kind"] == "permission"
        assert recorder.requests == []
