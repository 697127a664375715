"""Entry point for the docsearch MCP server."""

from docsearch.server import create_server


def main() -> None:
    """Run the docsearch MCP server."""
    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
