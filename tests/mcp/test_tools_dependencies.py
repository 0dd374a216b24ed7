"""Tests for the dependency tools."""

import pytest

from qinglong_mcp.mcp.tools.dependencies import (
    DependencyInput,
    DependencyType,
    create_dependencies,
    list_dependencies,
    render_dependency,
)


class TestRenderDependency:
    """Tests for the dependency template."""

    def test_known_type_label(self):
        """Test the numeric type renders as the package manager name."""
        text = render_dependency({"id": 1, "name": "requests", "type": 2})

        assert text.startswith("## requests (ID: 1)\n")
        assert "- **Type**: Python3" in text

    def test_unknown_type_shown_raw(self):
        """Test an unknown type value is shown as-is."""
        assert "- **Type**: 7" in render_dependency({"id": 1, "name": "x", "type": 7})

    def test_remark(self):
        """Test the remark is shown when present."""
        text = render_dependency({"id": 1, "name": "x", "type": 1, "remark": "pinned"})

        assert "- **Remark**: pinned" in text


class TestListDependencies:
    """Tests for list_dependencies."""

    @pytest.mark.asyncio
    async def test_no_query_without_search(self, client, panel, text_of):
        """Test no query string is sent when not searching."""
        panel.ok("GET", "/dependencies", [{"id": 1, "name": "axios", "type": 1}])

        output = text_of(await list_dependencies(client))

        assert panel.last.url.query == b""
        assert "## axios (ID: 1)" in output
        assert "- **Type**: NodeJS" in output

    @pytest.mark.asyncio
    async def test_search_value_sent(self, client, panel, text_of):
        """Test the search value is sent when given."""
        panel.ok("GET", "/dependencies", [])

        output = text_of(await list_dependencies(client, search_value="axios"))

        assert panel.last.url.params["searchValue"] == "axios"
        assert output == "No dependencies found"


class TestCreateDependencies:
    """Tests for create_dependencies."""

    @pytest.mark.asyncio
    async def test_posts_numeric_types(self, client, panel):
        """Test the dependency type is sent as its number."""
        panel.ok("POST", "/dependencies", [{"id": 1}])

        output = await create_dependencies(
            client, [DependencyInput(name="requests", type=DependencyType.PYTHON3)]
        )

        assert panel.last_json() == [{"name": "requests", "type": 2}]
        assert output == "✅ Created 1 dependency"

    @pytest.mark.asyncio
    async def test_plural_message(self, client, panel):
        """Test the count is reported for several dependencies."""
        panel.ok("POST", "/dependencies", [{"id": 1}, {"id": 2}])

        output = await create_dependencies(
            client,
            [DependencyInput(name="a", type=1), DependencyInput(name="b", type=3)],
        )

        assert output == "✅ Created 2 dependencies"


class TestDependencyTools:
    """Tests for the registered dependency tools."""

    @pytest.mark.asyncio
    async def test_reinstall(self, mcp_server, panel, text_of):
        """Test reinstall sends PUT to the reinstall endpoint."""
        panel.ok("PUT", "/dependencies/reinstall", None)

        result = await mcp_server.call_tool("qinglong_reinstall_dependencies", {"ids": [4]})

        assert panel.last.method == "PUT"
        assert text_of(result) == "✅ Reinstalling 1 dependency record(s)"
