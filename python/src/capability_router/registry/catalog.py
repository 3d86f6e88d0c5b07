"""
Built-in Server Catalog

This module contains the definitions of well-known capability servers that can be
enabled from the catalog, along with lookup and search helpers.
"""

from .models import ConfigField, ServerTemplate


def create_builtin_templates() -> list[ServerTemplate]:
    """Create all built-in server templates."""

    templates = []

    # Content servers
    templates.append(ServerTemplate(
        template_id="obsidian",
        name="Obsidian",
        package="@modelcontextprotocol/server-obsidian",
        description="Connect to Obsidian vaults for note-taking and knowledge management",
        category="content",
        capabilities=["note-management", "knowledge-graph", "markdown-processing"],
        version="1.0.0",
        author="Anthropic",
        is_official=True,
        requires_auth=True,
        config_fields=[
            ConfigField(name="vaultPath", field_type="text", required=True),
            ConfigField(name="apiKey", field_type="password", required=True)
        ],
        documentation_url="https://docs.anthropic.com/mcp/servers/obsidian",
        repository_url="https://github.com/anthropics/mcp-obsidian"
    ))

    templates.append(ServerTemplate(
        template_id="notion",
        name="Notion",
        package="@modelcontextprotocol/server-notion",
        description="Integrate with Notion for content management and database operations",
        category="content",
        capabilities=["database-access", "page-creation", "content-sync"],
        version="1.2.1",
        author="Anthropic",
        is_official=True,
        requires_auth=True,
        config_fields=[
            ConfigField(name="notionToken", field_type="password", required=True),
            ConfigField(name="databaseId", field_type="text", required=False)
        ]
    ))

    # Data servers
    templates.append(ServerTemplate(
        template_id="github",
        name="GitHub",
        package="@modelcontextprotocol/server-github",
        description="Access GitHub repositories, issues, and code examples",
        category="data",
        capabilities=["repo-access", "issue-management", "code-search"],
        version="1.1.5",
        author="Anthropic",
        is_official=True,
        requires_auth=True,
        config_fields=[
            ConfigField(name="githubToken", field_type="password", required=True),
            ConfigField(name="defaultRepo", field_type="text", required=False)
        ]
    ))

    templates.append(ServerTemplate(
        template_id="google-drive",
        name="Google Drive",
        package="@modelcontextprotocol/server-google-drive",
        description="Access and manage files in Google Drive",
        category="data",
        capabilities=["file-access", "document-sync", "collaboration"],
        version="1.0.8",
        author="Anthropic",
        is_official=True,
        requires_auth=True,
        config_fields=[
            ConfigField(name="clientId", field_type="text", required=True),
            ConfigField(name="clientSecret", field_type="password", required=True)
        ]
    ))

    # Media servers
    templates.append(ServerTemplate(
        template_id="puppeteer",
        name="Puppeteer",
        package="@modelcontextprotocol/server-puppeteer",
        description="Web scraping and screenshot capabilities",
        category="media",
        capabilities=["web-scraping", "screenshot", "pdf-generation"],
        version="2.0.3",
        author="Anthropic",
        is_official=True,
        requires_auth=False
    ))

    templates.append(ServerTemplate(
        template_id="youtube",
        name="YouTube",
        package="mcp-server-youtube",
        description="YouTube content integration and video analysis",
        category="media",
        capabilities=["video-search", "transcript-access", "channel-info"],
        version="0.8.2",
        author="Community",
        is_official=False,
        requires_auth=True,
        config_fields=[
            ConfigField(name="youtubeApiKey", field_type="password", required=True)
        ]
    ))

    # Communication and productivity servers
    templates.append(ServerTemplate(
        template_id="slack",
        name="Slack",
        package="@modelcontextprotocol/server-slack",
        description="Team communication and channel management",
        category="communication",
        capabilities=["message-sending", "channel-access", "user-management"],
        version="1.1.0",
        author="Anthropic",
        is_official=True,
        requires_auth=True,
        config_fields=[
            ConfigField(name="slackToken", field_type="password", required=True),
            ConfigField(name="defaultChannel", field_type="text", required=False)
        ]
    ))

    templates.append(ServerTemplate(
        template_id="todoist",
        name="Todoist",
        package="mcp-server-todoist",
        description="Task management and project organization",
        category="productivity",
        capabilities=["task-creation", "project-sync", "deadline-tracking"],
        version="0.9.1",
        author="Community",
        is_official=False,
        requires_auth=True,
        config_fields=[
            ConfigField(name="todoistToken", field_type="password", required=True)
        ]
    ))

    return templates


class ServerCatalog:
    """Lookup and search over the built-in server templates."""

    def __init__(self, templates: list[ServerTemplate] | None = None):
        self.templates: dict[str, ServerTemplate] = {}
        for template in templates if templates is not None else create_builtin_templates():
            self.templates[template.template_id] = template

    def get_template(self, template_id: str) -> ServerTemplate | None:
        return self.templates.get(template_id)

    def list_templates(self, category: str | None = None) -> list[ServerTemplate]:
        """List templates, optionally restricted to one category."""
        templates = list(self.templates.values())
        if category:
            templates = [t for t in templates if t.category == category]
        return templates

    def get_categories(self) -> list[str]:
        """Get the distinct template categories in catalog order."""
        return list(dict.fromkeys(t.category for t in self.templates.values()))

    def search_templates(self, term: str, category: str | None = None) -> list[ServerTemplate]:
        """Search templates by name, description, or capabilities."""
        term_lower = term.lower()
        results = []

        for template in self.list_templates(category):
            if (term_lower in template.name.lower() or
                term_lower in template.description.lower() or
                any(term_lower in cap.lower() for cap in template.capabilities)):
                results.append(template)

        return results
